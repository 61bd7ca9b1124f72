"""
Shelf label generator for products.
Uses Pillow and python-barcode to render a Code128 label as a PNG data URL.
"""
import io
import base64
import logging
from PIL import Image, ImageDraw, ImageFont
from typing import Optional
import barcode
from barcode.writer import ImageWriter

logger = logging.getLogger(__name__)


def _load_fonts():
    try:
        return (
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf', 16),
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf', 12),
        )
    except (OSError, IOError):
        return ImageFont.load_default(), ImageFont.load_default()


def _draw_centered(draw, y, text, font, width):
    bbox = draw.textbbox((0, 0), text, font=font)
    text_width = bbox[2] - bbox[0]
    draw.text(((width - text_width) // 2, y), text, fill='black', font=font)
    return bbox[3] - bbox[1]


def render_code128(value: str) -> Image.Image:
    """Render a bare Code128 symbol without the human readable line"""
    code128 = barcode.get_barcode_class('code128')
    return code128(value, writer=ImageWriter()).render({
        'write_text': False,
        'module_width': 0.3,
        'module_height': 18.0,
        'quiet_zone': 2.0,
        'font_size': 0,
        'text_distance': 0,
        'background': 'white',
        'foreground': 'black',
    })


def generate_product_label(
    product_name: str,
    barcode_value: str,
    price_text: Optional[str] = None,
    department_name: Optional[str] = None,
    width: int = 400,
    height: int = 200,
) -> str:
    """
    Generate a product shelf label.

    Layout, top to bottom: department, barcode, barcode value, product name
    and price. Returns a base64 PNG data URL.
    """
    if len(product_name) > 30:
        product_name = product_name[:30] + '...'

    img = Image.new('RGB', (width, height), color='white')
    draw = ImageDraw.Draw(img)
    font_bold, font_small = _load_fonts()
    margin = 10

    y = 8
    if department_name:
        y += _draw_centered(draw, y, department_name[:30], font_small, width) + 6

    bottom_reserved = 48
    try:
        symbol = render_code128(barcode_value)
        symbol_width, symbol_height = symbol.size
        target_width = width - 2 * margin
        scale = target_width / symbol_width
        target_height = int(symbol_height * scale)
        available = height - y - bottom_reserved
        if target_height > available:
            scale = available / symbol_height
            target_height = available
            target_width = int(symbol_width * scale)
        symbol = symbol.resize((target_width, target_height), Image.Resampling.BILINEAR)
        img.paste(symbol, ((width - target_width) // 2, y))
        y += target_height + 4
    except Exception as e:
        # Unencodable values still get a readable label
        logger.error(f"Barcode generation failed for '{barcode_value}': {str(e)}")
        y += 10

    y += _draw_centered(draw, y, barcode_value, font_small, width) + 4
    name_line = f"{product_name}  {price_text}" if price_text else product_name
    _draw_centered(draw, y, name_line, font_bold, width)

    buffer = io.BytesIO()
    img.save(buffer, format='PNG', optimize=False, compress_level=1)
    image_base64 = base64.b64encode(buffer.getvalue()).decode('utf-8')
    buffer.close()
    img.close()

    return f'data:image/png;base64,{image_base64}'
