"""QR code and printable poster rendering.

Every function here is a pure mapping from a URL and styling options to PNG
bytes; nothing is cached or written to disk.
"""

import io
import logging
import zipfile
from dataclasses import dataclass

import qrcode
from PIL import Image, ImageColor, ImageDraw, ImageFont

from bar_ordering_client.routes import menu_url, table_order_url

logger = logging.getLogger(__name__)

QR_SIZE = 512
MENU_QR_FILENAME = "projectbar-menu-qr.png"
MENU_POSTER_FILENAME = "projectbar-menu-poster.png"
MENU_POSTER_TITLE = "Escanea para ver el menú"
TABLE_POSTER_SUBTITLE = "Escanea para hacer tu pedido"


@dataclass(frozen=True)
class PosterStyle:
    """Layout and colours of a printable poster.

    Attributes:
        size: Width of the poster and side of the QR area
        padding: Margin around the white QR card
        footer_height: Extra height below the card for the caption
        gradient_start: Background colour at the top-left corner
        gradient_end: Background colour at the bottom-right corner
        title_color: Caption colour
        subtitle_color: Secondary caption colour
        corner_radius: Radius of the white QR card corners
        title_font_size: Caption size in pixels
        subtitle_font_size: Secondary caption size in pixels
    """

    size: int = 600
    padding: int = 40
    footer_height: int = 100
    gradient_start: str = "#0f172a"
    gradient_end: str = "#1e293b"
    title_color: str = "#10b981"
    subtitle_color: str = "#94a3b8"
    corner_radius: int = 16
    title_font_size: int = 24
    subtitle_font_size: int = 18


def table_qr_filename(table_number: int) -> str:
    return f"projectbar-mesa-{table_number}-qr.png"


def table_poster_filename(table_number: int) -> str:
    return f"projectbar-mesa-{table_number}-poster.png"


def render_qr_image(url: str, size: int = QR_SIZE) -> Image.Image:
    """Render a black-on-white QR code scaled to ``size`` pixels square."""
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
    )
    qr.add_data(url)
    qr.make(fit=True)

    image = qr.make_image(fill_color="black", back_color="white").get_image().convert("RGB")
    return image.resize((size, size), Image.Resampling.NEAREST)


def render_qr_png(url: str, size: int = QR_SIZE) -> bytes:
    """PNG bytes of a plain QR code for ``url``."""
    return _to_png(render_qr_image(url, size))


def render_qr_poster(
    url: str,
    title: str,
    subtitle: str | None = None,
    style: PosterStyle | None = None,
) -> bytes:
    """Render a poster: gradient background, QR on a rounded card, caption below.

    Args:
        url: URL to encode
        title: Main caption
        subtitle: Optional second caption line
        style: Layout and colours, defaults to PosterStyle()

    Returns:
        PNG bytes of a ``size`` by ``size + footer_height`` image
    """
    style = style or PosterStyle()
    width = style.size
    height = style.size + style.footer_height

    poster = _diagonal_gradient(width, height, style.gradient_start, style.gradient_end)
    draw = ImageDraw.Draw(poster)

    card_size = style.size - style.padding * 2
    draw.rounded_rectangle(
        (style.padding, style.padding, style.padding + card_size, style.padding + card_size),
        radius=style.corner_radius,
        fill="white",
    )

    code_size = card_size - 20
    poster.paste(render_qr_image(url, code_size), (style.padding + 10, style.padding + 10))

    center_x = width // 2
    if subtitle is None:
        draw.text(
            (center_x, style.size + 50),
            title,
            fill=style.title_color,
            font=_font(style.title_font_size),
            anchor="ms",
        )
    else:
        draw.text(
            (center_x, style.size + 45),
            title,
            fill=style.title_color,
            font=_font(style.title_font_size),
            anchor="ms",
        )
        draw.text(
            (center_x, style.size + 75),
            subtitle,
            fill=style.subtitle_color,
            font=_font(style.subtitle_font_size),
            anchor="ms",
        )

    return _to_png(poster)


def render_menu_poster(public_base_url: str, style: PosterStyle | None = None) -> bytes:
    return render_qr_poster(menu_url(public_base_url), MENU_POSTER_TITLE, style=style)


def render_table_poster(public_base_url: str, table_number: int, style: PosterStyle | None = None) -> bytes:
    return render_qr_poster(
        table_order_url(public_base_url, table_number),
        f"Mesa {table_number}",
        TABLE_POSTER_SUBTITLE,
        style=style,
    )


def render_table_qr_archive(public_base_url: str, table_count: int, posters: bool = False) -> bytes:
    """ZIP archive with one QR image per table, numbered 1..table_count.

    Args:
        public_base_url: Origin the codes point to
        table_count: Number of tables
        posters: Render full posters instead of plain codes

    Returns:
        ZIP file bytes

    Raises:
        ValueError: If table_count is not positive
    """
    if table_count <= 0:
        raise ValueError(f"table_count must be positive, got {table_count}")

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for table_number in range(1, table_count + 1):
            if posters:
                archive.writestr(
                    table_poster_filename(table_number),
                    render_table_poster(public_base_url, table_number),
                )
            else:
                archive.writestr(
                    table_qr_filename(table_number),
                    render_qr_png(table_order_url(public_base_url, table_number)),
                )

    logger.info(f"Generated QR archive for {table_count} tables")
    return buffer.getvalue()


def _diagonal_gradient(width: int, height: int, start: str, end: str) -> Image.Image:
    start_rgb = ImageColor.getrgb(start)
    end_rgb = ImageColor.getrgb(end)

    # Mask value grows with x + y, so 0 at the top-left and 255 at the bottom-right.
    vertical = Image.linear_gradient("L")
    horizontal = vertical.transpose(Image.Transpose.ROTATE_90)
    mask = Image.blend(vertical, horizontal, 0.5).resize((width, height))
    return Image.composite(
        Image.new("RGB", (width, height), end_rgb),
        Image.new("RGB", (width, height), start_rgb),
        mask,
    )


def _font(size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    try:
        return ImageFont.truetype("DejaVuSans-Bold.ttf", size)
    except OSError:
        return ImageFont.load_default(size)


def _to_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
