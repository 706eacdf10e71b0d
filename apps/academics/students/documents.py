import logging
from io import BytesIO

from PIL import Image, ImageDraw, ImageOps, UnidentifiedImageError
from django.conf import settings
from django.core.files.storage import default_storage

from apps.core.metrics import services as metrics
from apps.core.records.errors import ValidationError

from .services import certificate_id

logger = logging.getLogger(__name__)

BRAND = (194, 65, 12)
GOLD = (201, 162, 39)


def image_to_pdf_bytes(images):
    if not images:
        return b''
    rgb_images = [img.convert('RGB') for img in images]
    output = BytesIO()
    rgb_images[0].save(output, format='PDF', save_all=True, append_images=rgb_images[1:])
    return output.getvalue()


def image_to_png_bytes(image):
    output = BytesIO()
    image.save(output, format='PNG')
    return output.getvalue()


def _short_date(value):
    return value.strftime('%d %b %y') if value else '-'


def _paste_photo(card, draw, photo_name, box):
    left, top, right, bottom = box
    if photo_name:
        try:
            with default_storage.open(photo_name, 'rb') as photo_file:
                photo = Image.open(photo_file).convert('RGB')
                photo = ImageOps.fit(photo, (right - left, bottom - top))
                card.paste(photo, (left, top))
                return
        except (OSError, UnidentifiedImageError):
            logger.warning('Could not load student photo %s', photo_name)
    draw.rectangle(box, outline='black')
    draw.text((left + 50, top + (bottom - top) // 2), 'PHOTO', fill='black')


def build_id_card_image(student):
    card = Image.new('RGB', (1000, 600), color='white')
    draw = ImageDraw.Draw(card)
    draw.rectangle((0, 0, 1000, 90), fill=BRAND)
    draw.text((24, 30), settings.STUDIO_NAME, fill='white')

    parent_contact = student.father_contact or student.mother_contact or '-'
    rows = [
        ('Name', student.name),
        ('ID', student.roll_number),
        ('Course', student.course),
        ('Batch', (student.batch or '').split(' (')[0] or '-'),
        ('WhatsApp', student.whatsapp or '-'),
        ('Parent', parent_contact),
        ('Valid Till', _short_date(student.validity_end)),
    ]
    for index, (label, value) in enumerate(rows):
        draw.text((24, 112 + index * 48), f"{label}: {value}", fill='black')

    _paste_photo(card, draw, student.photo, (740, 130, 960, 390))

    draw.rectangle((0, 540, 1000, 600), fill=BRAND)
    draw.text((24, 560), f"{student.roll_number}  |  {settings.STUDIO_CONTACT}", fill='white')
    return card


def generate_id_card_png(student) -> bytes:
    return image_to_png_bytes(build_id_card_image(student))


def generate_id_cards_pdf(students) -> bytes:
    return image_to_pdf_bytes([build_id_card_image(student) for student in students])


def build_certificate_image(student, sessions_attended, issued_on):
    page = Image.new('RGB', (1754, 1240), color='white')
    draw = ImageDraw.Draw(page)
    draw.rectangle((30, 30, 1724, 1210), outline=GOLD, width=12)
    draw.rectangle((60, 60, 1694, 1180), outline=BRAND, width=3)

    draw.text((760, 160), settings.STUDIO_NAME, fill=BRAND)
    draw.text((740, 240), 'CERTIFICATE OF COMPLETION', fill=GOLD)
    draw.text((780, 380), 'This is to certify that', fill='black')
    draw.text((780, 450), student.name, fill='black')
    draw.text((700, 520), 'has successfully completed the', fill='black')
    draw.text((780, 580), f"{student.course} Course", fill=GOLD)
    draw.text((700, 660), f"{sessions_attended}/{student.total_sessions} sessions completed", fill='black')

    draw.text((140, 1000), f"Certificate ID: {certificate_id(student.roll_number)}", fill='black')
    draw.text((140, 1050), f"Issued on: {issued_on.strftime('%d %B %Y')}", fill='black')
    draw.line((1300, 1040, 1600, 1040), fill='black', width=2)
    draw.text((1380, 1060), 'Director', fill='black')
    return page


def generate_certificate_pdf(student, attendance, issued_on) -> bytes:
    """Completion certificate; refused until all sessions are attended."""
    records = metrics.records_for_student(student.id, attendance)
    if not metrics.certificate_eligible(student, records):
        raise ValidationError('Student has not completed all sessions yet.')
    page = build_certificate_image(student, metrics.sessions_attended(records), issued_on)
    return image_to_pdf_bytes([page])
