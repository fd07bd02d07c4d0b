"""Image processing: transcoding oversized uploads."""

from dataclasses import dataclass
from io import BytesIO

from PIL import Image, ImageOps
from pillow_heif import register_heif_opener

# Register HEIF/HEIC support
register_heif_opener()

MAX_DIMENSION = 3000
JPEG_QUALITY = 80


@dataclass(frozen=True)
class TranscodeResult:
    """Outcome of a transcode attempt.

    ``data`` is always safe to place: the recompressed JPEG on success,
    the untouched input on failure.
    """

    data: bytes
    ok: bool
    error: str | None = None

    @property
    def extension(self) -> str | None:
        return ".jpg" if self.ok else None


def transcode_oversized(
    image_data: bytes,
    max_dimension: int = MAX_DIMENSION,
    quality: int = JPEG_QUALITY,
) -> TranscodeResult:
    """Fit an image inside max_dimension x max_dimension and re-encode as JPEG.

    Aspect ratio is kept and small images are never enlarged.
    """
    try:
        img = Image.open(BytesIO(image_data))
        img = ImageOps.exif_transpose(img)
        img.thumbnail((max_dimension, max_dimension), Image.LANCZOS)

        # Convert to RGB if needed (RGBA, P, etc.)
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")

        out = BytesIO()
        img.save(out, "JPEG", quality=quality)
    except Exception as e:
        return TranscodeResult(data=image_data, ok=False, error=str(e))
    return TranscodeResult(data=out.getvalue(), ok=True)
