import re
import time
from pathlib import Path

import aiofiles

from filing_intake.config import settings
from filing_intake.models.submission import IntakeSubmission
from filing_intake.utils.logger import get_logger
from filing_intake.utils.exceptions import StorageError

logger = get_logger(__name__)


class SubmissionStore:
    """Persists intake submissions as JSON records under DATA_DIR/intakes"""

    def __init__(self, data_dir: str = None):
        self.intakes_dir = Path(data_dir or settings.DATA_DIR) / "intakes"
        self.logger = logger

    async def save(self, submission: IntakeSubmission) -> str:
        """Write the submission and return its id (the record's file stem)"""
        safe_name = re.sub(r"[^a-zA-Z0-9]", "_", submission.contact_info.full_name)
        submission_id = f"{int(time.time() * 1000)}-{safe_name}"
        file_path = self.intakes_dir / f"{submission_id}.json"

        try:
            self.intakes_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(file_path, 'w', encoding='utf-8') as f:
                await f.write(submission.model_dump_json(by_alias=True, indent=2))
        except OSError as e:
            self.logger.error(f"Failed to save intake submission: {str(e)}")
            raise StorageError(f"Failed to save intake submission: {str(e)}") from e

        self.logger.info(f"Submission saved to {file_path}")
        return submission_id
