"""
Printable queue tickets
Uses PIL/Pillow and python-barcode; returns the ticket as a PNG data URL
"""
import io
import base64
import logging
from typing import Optional

import barcode
from barcode.errors import BarcodeError
from barcode.writer import ImageWriter
from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)


def load_fonts(large=56, medium=18, small=12):
    try:
        return (
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf', large),
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf', medium),
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf', small),
        )
    except (OSError, IOError):
        try:
            return (
                ImageFont.truetype('arial.ttf', large),
                ImageFont.truetype('arial.ttf', medium),
                ImageFont.truetype('arial.ttf', small),
            )
        except (OSError, IOError):
            default = ImageFont.load_default()
            return default, default, default


def draw_centered(draw, text, y, font, width):
    bbox = draw.textbbox((0, 0), text, font=font)
    draw.text(((width - (bbox[2] - bbox[0])) // 2, y), text, fill='black', font=font)
    return bbox[3] - bbox[1]


def render_barcode(value, max_width, max_height):
    """Code128 image of `value` scaled to fit the given box"""
    code128 = barcode.get_barcode_class('code128')
    image = code128(value, writer=ImageWriter()).render({
        'write_text': False,
        'module_width': 0.3,
        'module_height': 15.0,
        'quiet_zone': 2.0,
        'background': 'white',
        'foreground': 'black',
    })
    image_width, image_height = image.size
    scale = min(max_width / image_width, max_height / image_height)
    return image.resize(
        (max(int(image_width * scale), 1), max(int(image_height * scale), 1)),
        Image.Resampling.BILINEAR
    )


def generate_ticket_image(
    queue_name: str,
    queue_number: str,
    issued_at: Optional[str] = None,
    barcode_value: Optional[str] = None,
    customer_name: Optional[str] = None,
    width: int = 300,
    height: int = 360,
) -> str:
    """
    Draw a queue ticket: queue name, the big number, issue time and a
    Code128 barcode of `barcode_value` (defaults to the number).

    Returns:
        Base64-encoded PNG image as data URL string
    """
    barcode_value = barcode_value or queue_number
    if len(queue_name) > 28:
        queue_name = queue_name[:28] + '...'

    img = Image.new('RGB', (width, height), color='white')
    draw = ImageDraw.Draw(img)
    font_large, font_medium, font_small = load_fonts()

    y = 16
    y += draw_centered(draw, queue_name, y, font_medium, width) + 24
    y += draw_centered(draw, queue_number, y, font_large, width) + 20
    if customer_name:
        y += draw_centered(draw, customer_name[:30], y, font_medium, width) + 10
    if issued_at:
        y += draw_centered(draw, issued_at, y, font_small, width) + 14

    margin = 20
    try:
        barcode_img = render_barcode(barcode_value, width - 2 * margin, height - y - 40)
        img.paste(barcode_img, ((width - barcode_img.size[0]) // 2, y))
        y += barcode_img.size[1] + 6
        draw_centered(draw, barcode_value, y, font_small, width)
    except (BarcodeError, ValueError) as e:
        logger.error(f"Barcode generation failed for '{barcode_value}': {str(e)}")
        draw_centered(draw, f'TICKET: {barcode_value}', y, font_small, width)

    draw_centered(draw, 'Please wait for your number to be called', height - 22, font_small, width)

    buffer = io.BytesIO()
    img.save(buffer, format='PNG', optimize=False, compress_level=1)
    image_base64 = base64.b64encode(buffer.getvalue()).decode('utf-8')
    buffer.close()
    img.close()

    return f'data:image/png;base64,{image_base64}'
