"""
Image and mask file helpers built on Pillow.

Images are kept in their native dtype since the threshold is reported in
the image's own intensity domain.
"""

from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
from PIL import Image

IMG_EXTS = {".jpg", ".jpeg", ".png", ".bmp", ".tif", ".tiff"}


def load_image(path: str) -> np.ndarray:
    """Return a grayscale array in native dtype (uint8, uint16, int32, float32 or bool)."""
    p = Path(path)
    if p.suffix.lower() == ".npy":
        return np.load(path)
    img = Image.open(path)
    if img.mode not in ("L", "I;16", "I", "F", "1"):
        img = img.convert("L")
    arr = np.asarray(img)
    return np.ascontiguousarray(arr)


def load_mask(path: str) -> np.ndarray:
    """Load a .npy or image mask. Paletted PNGs keep their palette indices."""
    p = Path(path)
    if p.suffix.lower() == ".npy":
        return np.load(path)
    img = Image.open(path)
    if img.mode not in ("P", "L", "I;16", "I", "1"):
        img = img.convert("L")
    return np.ascontiguousarray(np.asarray(img))


def save_image(arr: np.ndarray, out_path: str) -> None:
    """Save as .npy or through Pillow (format from the suffix), creating parent dirs."""
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    if Path(out_path).suffix.lower() == ".npy":
        np.save(out_path, arr)
        return
    Image.fromarray(np.asarray(arr)).save(out_path)


def find_image_mask_pairs(images_dir: str, masks_dir: Optional[str]) -> List[Tuple[str, Optional[str]]]:
    """Pair images with masks by basename. Prefer .npy over .png, None if missing."""
    images_dir = Path(images_dir)
    imgs = [p for p in images_dir.iterdir() if p.is_file() and p.suffix.lower() in IMG_EXTS | {".npy"}]
    pairs = []
    for ip in sorted(imgs):
        if masks_dir is None:
            pairs.append((str(ip), None))
            continue
        npy = Path(masks_dir) / f"{ip.stem}.npy"
        png = Path(masks_dir) / f"{ip.stem}.png"
        mask_path = str(npy) if npy.exists() else (str(png) if png.exists() else None)
        pairs.append((str(ip), mask_path))
    return pairs
