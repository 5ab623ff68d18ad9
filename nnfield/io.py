"""
Image I/O for the matcher. It includes functions for:
- Loading and saving images (scikit-image).
- Normalizing the channel count of decoded buffers.
- Encoding/decoding in-memory PNG bytes for the web front-end (Pillow).
- Downscaling large inputs before matching (OpenCV).

Every decode problem is reported as DecodeFailure and every encode problem as
EncodeFailure; no partial buffer is ever returned.
"""

import io
import logging
import os

import cv2
import numpy as np
from PIL import Image
from skimage import io as skio
from skimage.color import rgb2gray
from skimage.util import img_as_ubyte

from .errors import DecodeFailure, EncodeFailure, InvalidConfiguration

logger = logging.getLogger(__name__)

_PIL_MODES = {1: "L", 3: "RGB", 4: "RGBA"}


def load_image(path, channels=3):
    """
    Load an image from disk as a (H, W, channels) array.

    Args:
        path (str): Path to the image file.
        channels (int): Number of channels to return (alpha is dropped,
            grayscale is replicated).

    Returns:
        np.ndarray: Decoded image, row-major, pixel (x, y) at [y, x].

    Raises:
        DecodeFailure: If the file is missing or cannot be decoded.
    """
    if not os.path.exists(path):
        raise DecodeFailure(f"Image file not found: {path}")

    try:
        image = skio.imread(path)
    except Exception as exc:
        raise DecodeFailure(f"Failed to decode image: {path}") from exc

    if image is None or image.size == 0:
        raise DecodeFailure(f"Failed to decode image: {path}")

    logger.debug("loaded %s with shape %s", path, image.shape)
    try:
        return to_channels(image, channels)
    except InvalidConfiguration as exc:
        raise DecodeFailure(f"Unsupported image layout in {path}: {image.shape}") from exc


def save_image(path, image):
    """
    Save an image to disk; the format follows the file extension.

    Raises:
        EncodeFailure: If the image cannot be encoded or written.
    """
    image = np.asarray(image)
    if image.ndim == 3 and image.shape[2] == 1:
        image = image[..., 0]
    try:
        skio.imsave(path, image, check_contrast=False)
    except Exception as exc:
        raise EncodeFailure(f"Failed to write image: {path}") from exc


def to_channels(image, channels=3):
    """
    Return `image` as a (H, W, channels) array.

    The result is always uint8. Float images are taken to be in [0, 1],
    unsigned images wider than 8 bits (e.g. 16-bit PNG) are rescaled to the
    8-bit range, and other signed buffers are taken to hold 0..255 values.
    """
    if channels < 1:
        raise InvalidConfiguration(f"channels must be >= 1, got {channels}")

    image = np.asarray(image)
    if image.dtype == bool:
        image = image.astype(np.uint8) * 255
    elif np.issubdtype(image.dtype, np.floating):
        image = (np.clip(image, 0.0, 1.0) * 255).round().astype(np.uint8)
    elif np.issubdtype(image.dtype, np.unsignedinteger) or image.dtype == np.int8:
        image = img_as_ubyte(image)
    elif image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)

    if image.ndim == 2:
        image = image[:, :, np.newaxis]
    if image.ndim != 3:
        raise InvalidConfiguration(f"Unsupported image shape: {image.shape}")

    c = image.shape[2]
    if c == channels:
        return image

    if channels == 1:
        if c >= 3:
            gray = rgb2gray(image[..., :3])
            return (np.clip(gray, 0.0, 1.0) * 255).round().astype(np.uint8)[:, :, np.newaxis]
        return image[..., :1]

    if c < 3:
        # gray or gray+alpha
        return np.repeat(image[..., :1], channels, axis=2)
    if c > channels:
        return image[..., :channels]

    # RGB asked to grow, e.g. to RGBA: pad with opaque alpha
    pad = np.full(image.shape[:2] + (channels - c,), np.iinfo(image.dtype).max, dtype=image.dtype)
    return np.concatenate([image, pad], axis=2)


def image_from_bytes(data, channels=3):
    """Decode an encoded image (PNG, JPEG, ...) held in memory."""
    try:
        img = Image.open(io.BytesIO(data))
        img = img.convert(_PIL_MODES.get(channels, "RGB"))
        array = np.array(img)
    except Exception as exc:
        raise DecodeFailure("Failed to decode uploaded image") from exc
    return to_channels(array, channels)


def image_to_bytes(image):
    """Encode an image array as PNG bytes."""
    image = np.asarray(image)
    image = to_channels(image, image.shape[2] if image.ndim == 3 else 1)
    if image.shape[2] == 1:
        image = image[..., 0]
    try:
        img_pil = Image.fromarray(image)
        buf = io.BytesIO()
        img_pil.save(buf, format="PNG")
    except Exception as exc:
        raise EncodeFailure("Failed to encode image as PNG") from exc
    return buf.getvalue()


def resize_to_max_size(image, max_size, interpolation=cv2.INTER_AREA):
    """
    Resize image so that max(h, w) <= max_size while keeping aspect ratio.
    """
    h, w = image.shape[:2]
    if max(h, w) <= max_size:
        return image

    scale = max_size / max(h, w)
    new_w = max(1, int(w * scale))
    new_h = max(1, int(h * scale))

    resized = cv2.resize(image, (new_w, new_h), interpolation=interpolation)
    if image.ndim == 3 and resized.ndim == 2:
        resized = resized[:, :, np.newaxis]

    logger.info("resized %dx%d -> %dx%d", w, h, new_w, new_h)
    return resized


def save_field(path, nnf, scores):
    """Store the raw field (nnf and scores arrays) in a .npz archive."""
    try:
        np.savez(path, nnf=nnf, scores=scores)
    except OSError as exc:
        raise EncodeFailure(f"Failed to write field: {path}") from exc
