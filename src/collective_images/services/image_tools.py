"""Image manipulation utilities.

This module wraps the few operations the handlers need on raw image
bytes using Pillow: resizing and re-encoding, reading dimensions, and
rendering ASCII art. SVG rasterization is delegated to CairoSVG.

All functions are synchronous and CPU bound; async callers run them
with ``asyncio.to_thread``.
"""

from io import BytesIO

from PIL import Image, UnidentifiedImageError

from collective_images.entities import AsciiOptions
from collective_images.entities.options import MAX_ASCII_COLUMNS, MAX_ASCII_ROWS, MAX_IMAGE_DIMENSION
from collective_images.errors import TransformError

# format -> (Pillow format, media type)
OUTPUT_FORMATS: dict[str, tuple[str, str]] = {
    "png": ("PNG", "image/png"),
    "jpg": ("JPEG", "image/jpeg"),
    "jpeg": ("JPEG", "image/jpeg"),
    "gif": ("GIF", "image/gif"),
    "webp": ("WEBP", "image/webp"),
}

# Darkest first, so white backgrounds become blank and get trimmed.
ASCII_RAMP = "@80GCLft1i;:,. "
ANSI_RESET = "\x1b[0m"


def _open_image(data: bytes) -> Image.Image:
    """Open raw image bytes with Pillow."""
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise TransformError(f"Unable to decode image: {e}") from e
    return img


def media_type_for(fmt: str) -> str:
    """Media type of an output format, e.g. ``jpg`` -> ``image/jpeg``."""
    return OUTPUT_FORMATS[fmt.lower()][1]


def fit_size(
    size: tuple[int, int],
    width: int | None = None,
    height: int | None = None,
    limit: int | None = None,
) -> tuple[int, int]:
    """Scale ``size`` to fit a box, keeping the aspect ratio.

    With a single dimension the other one follows; with none the size is
    returned unchanged. A resized image never exceeds ``limit`` on either
    side.
    """
    w, h = size
    if width and height:
        scale = min(width / w, height / h)
    elif width:
        scale = width / w
    elif height:
        scale = height / h
    else:
        return size
    if limit and max(w, h) * scale > limit:
        scale = limit / max(w, h)
    return max(1, round(w * scale)), max(1, round(h * scale))


def _flatten(img: Image.Image, background: tuple[int, int, int]) -> Image.Image:
    """Composite an image onto a solid background and drop the alpha channel."""
    rgba = img.convert("RGBA")
    canvas = Image.new("RGBA", rgba.size, background + (255,))
    canvas.alpha_composite(rgba)
    return canvas.convert("RGB")


def resize_image(
    data: bytes,
    fmt: str,
    width: int | None = None,
    height: int | None = None,
) -> bytes:
    """Resize an image and re-encode it.

    Args:
        data: Raw image bytes in any format Pillow reads
        fmt: Output format key of OUTPUT_FORMATS
        width: Maximum width
        height: Maximum height

    Returns:
        The encoded image bytes
    """
    pil_format, _ = OUTPUT_FORMATS[fmt.lower()]
    img = _open_image(data)

    target = fit_size(img.size, width, height, limit=MAX_IMAGE_DIMENSION)
    if target != img.size:
        img = img.resize(target, Image.LANCZOS)

    if pil_format == "JPEG" and img.mode != "RGB":
        img = _flatten(img, (255, 255, 255))

    buffer = BytesIO()
    img.save(buffer, format=pil_format)
    return buffer.getvalue()


def image_dimensions(data: bytes) -> tuple[int, int]:
    """Return (width, height) of an encoded image."""
    img = _open_image(data)
    width, height = img.size
    if not width or not height:
        raise TransformError("Image has no dimensions")
    return width, height


def svg_to_png(svg: str) -> bytes:
    """Rasterize an SVG document to PNG."""
    # Imported lazily: cairosvg loads the native cairo library on import.
    import cairosvg

    return cairosvg.svg2png(bytestring=svg.encode("utf-8"))


def image_to_ascii(data: bytes, options: AsciiOptions) -> str:
    """Render an image as (optionally ANSI-colored) ASCII art.

    Each pixel of the downscaled image becomes one character, two with
    the "wide" variant, picked from a brightness ramp.
    """
    img = _open_image(data)
    background = (255, 255, 255) if options.white_bg else (0, 0, 0)
    rgb = _flatten(img, background)

    rows = min(max(1, options.height), MAX_ASCII_ROWS)
    src_width, src_height = rgb.size
    repeat = 2 if options.variant == "wide" else 1
    if options.width:
        cols = options.width
    else:
        # Terminal cells are about twice as tall as wide.
        cols = round(rows * src_width / src_height * 2 / repeat)
    cols = min(max(1, cols), MAX_ASCII_COLUMNS)

    pixels = rgb.resize((cols, rows), Image.LANCZOS).load()
    ramp = ASCII_RAMP[::-1] if options.reverse else ASCII_RAMP
    color_fg = options.colored and (options.fg or not options.bg)
    color_bg = options.colored and options.bg

    grid: list[list[tuple[str, tuple[int, int, int]]]] = []
    for y in range(rows):
        line = []
        for x in range(cols):
            r, g, b = pixels[x, y]
            luminance = 0.2126 * r + 0.7152 * g + 0.0722 * b
            char = ramp[round(luminance / 255 * (len(ramp) - 1))]
            line.extend([(char, (r, g, b))] * repeat)
        grid.append(line)

    if options.trim:
        grid = _trim_grid(grid)

    lines = []
    for line in grid:
        if not options.colored:
            lines.append("".join(char for char, _ in line))
            continue
        out = []
        for char, (r, g, b) in line:
            if color_bg:
                out.append(f"\x1b[48;2;{r};{g};{b}m")
            if color_fg:
                out.append(f"\x1b[38;2;{r};{g};{b}m")
            out.append(char)
        out.append(ANSI_RESET)
        lines.append("".join(out))
    return "\n".join(lines)


def _trim_grid(grid):
    """Drop trailing blanks on each line and blank lines around the art."""
    trimmed = []
    for line in grid:
        end = len(line)
        while end and line[end - 1][0] == " ":
            end -= 1
        trimmed.append(line[:end])

    while trimmed and not trimmed[0]:
        trimmed.pop(0)
    while trimmed and not trimmed[-1]:
        trimmed.pop()
    return trimmed
