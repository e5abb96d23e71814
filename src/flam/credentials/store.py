import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..domain.models import Credential

logger = logging.getLogger(__name__)


class CredentialStore:
    """handles API key persistence to a single JSON file."""
    
    def __init__(self, config_file: Path):
        self.config_file = config_file
        
    def load(self) -> Optional[str]:
        """
        load the stored API key.
        
        returns:
            the API key, or None when nobody is logged in on this machine
        """
        if not self.config_file.exists():
            return None
        
        try:
            with open(self.config_file, 'r') as f:
                data = json.load(f)
            return Credential.model_validate(data).api_key
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            # unreadable or corrupted file counts as logged out
            logger.warning(f"ignoring unreadable credential file {self.config_file}: {e}")
            return None
    
    def save(self, key: str) -> None:
        """
        replace the stored API key.
        
        the new file is written next to the old one and moved into place,
        so readers never see a partially written credential.
        
        raises:
            OSError: if the file cannot be written
        """
        credential = Credential(api_key=key)
        
        # ensure parent directory exists
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        
        fd, tmp_name = tempfile.mkstemp(
            dir=self.config_file.parent,
            prefix=f".{self.config_file.name}.",
            suffix=".tmp"
        )
        # mkstemp creates the file owner read/write only
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(credential.model_dump(by_alias=True), f)
            os.replace(tmp_name, self.config_file)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        
        logger.debug(f"saved API key to {self.config_file}")
    
    def clear(self) -> None:
        """remove the stored API key if there is one."""
        if self.config_file.exists():
            self.config_file.unlink()
            logger.debug(f"removed {self.config_file}")
