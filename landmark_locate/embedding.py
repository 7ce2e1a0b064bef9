from __future__ import annotations

import logging
import os
from typing import Optional

import numpy as np
from PIL import Image

try:  # optional dependency
    import torch  # type: ignore
except Exception:  # pragma: no cover - torch is only needed for on-device embedding
    torch = None  # type: ignore

from .errors import ServiceInitError
from .interfaces import ImageInput
from .utils import ensure_image_path

logger = logging.getLogger(__name__)

INPUT_SIZE = 256


def load_image_array(path: ImageInput, size: int = INPUT_SIZE) -> np.ndarray:
    """Decode an image into a (size, size, 3) float32 RGB array scaled to [0, 1]."""
    p = ensure_image_path(path)
    with Image.open(p) as im:
        rgb = im.convert("RGB").resize((size, size))
        return np.asarray(rgb, dtype=np.float32) / 255.0


class TorchScriptEmbedder:
    """Image embedding backed by a TorchScript model taking NHWC float input.

    `embed` returns the first output row, or None when the image cannot be
    decoded or inference fails.
    """

    def __init__(self, model_path: str | os.PathLike[str], size: int = INPUT_SIZE, threads: int = 2) -> None:
        if torch is None:
            raise ServiceInitError("torch not installed. Install with pip install 'landmark-locate[torch]'")
        try:
            torch.set_num_threads(threads)
            self.model = torch.jit.load(str(model_path), map_location="cpu")
            self.model.eval()
        except Exception as e:
            raise ServiceInitError(f"Could not load embedding model {model_path}: {e}") from e
        self.size = size
        logger.info("Loaded embedding model %s", model_path)

    def embed(self, image: ImageInput) -> Optional[list[float]]:
        if self.model is None:
            return None
        try:
            pixels = load_image_array(image, self.size)
            batch = torch.from_numpy(pixels).unsqueeze(0)
            with torch.no_grad():
                output = self.model(batch)
            features = output.reshape(output.shape[0], -1)[0]
            return features.cpu().numpy().astype(np.float64).tolist()
        except Exception as e:
            logger.warning("Could not embed %s: %s", image, e)
            return None

    def close(self) -> None:
        self.model = None
