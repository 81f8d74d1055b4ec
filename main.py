from __future__ import annotations

import logging
import time

from apps.api import create_app
from core.config import get_settings

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_boot_start_time = time.time()
app = create_app()
logger.info(
    "PV financing API initialized in %.2fs (horizon %d years)",
    time.time() - _boot_start_time,
    settings.horizon_years,
)
