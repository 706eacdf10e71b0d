import logging

from apps.core.records import access
from apps.core.records.records import StudioConfig

from .models import StudioSettings, generate_api_key

logger = logging.getLogger(__name__)

SETTINGS_KIND = 'settings'
EDITABLE_FIELDS = ('studio_name', 'admin_whatsapp', 'webhook_url') + StudioConfig.TOGGLES


def load_studio_config(*, actor=None):
    """Return the persisted studio configuration, creating defaults on first use."""
    record, created = access.upsert(
        SETTINGS_KIND,
        {'id': StudioSettings.SINGLETON_ID},
        {},
        actor=actor,
    )
    if created:
        logger.info('Created default studio settings')
    return record


def save_studio_config(*, changes, actor=None):
    patch = {name: value for name, value in changes.items() if name in EDITABLE_FIELDS}
    load_studio_config(actor=actor)
    return access.update(SETTINGS_KIND, StudioSettings.SINGLETON_ID, patch, actor=actor)


def rotate_api_key(*, actor=None):
    load_studio_config(actor=actor)
    record = access.update(
        SETTINGS_KIND,
        StudioSettings.SINGLETON_ID,
        {'lead_api_key': generate_api_key()},
        actor=actor,
    )
    logger.info('Rotated lead ingestion API key')
    return record
