import json
import os
import shutil
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from cloudstack_client.config.settings import settings
from cloudstack_client.database.profile_store_interface import BaseProfileStore
from cloudstack_client.exceptions import ConfigurationError, ProfileNotFoundError
from cloudstack_client.helpers.logger import setup_logging
from cloudstack_client.helpers.utils import ensure_directory_exists
from cloudstack_client.models.profile import ConnectionProfile

logger = setup_logging(__name__)


class JSONProfileStore(BaseProfileStore):
    """
    Connection profiles kept in a single JSON file.

    Layout: ``{"profiles": {"<name>": {"server": ..., "apiKey": ..., ...}}}``.
    """

    def __init__(self, db_file: Optional[str] = None):
        """
        Initialize JSONProfileStore.

        :param db_file: Path to the profiles file. Defaults to the ``PROFILE_FILE`` setting.
        """
        self.db_file = db_file or settings.get("PROFILE_FILE")
        ensure_directory_exists(os.path.dirname(os.path.abspath(self.db_file)))
        self.data = self._load_data()

    def _load_data(self) -> Dict[str, Dict[str, Any]]:
        """
        Load data from the JSON file. If the file contains invalid JSON, back it
        up and start from an empty store.

        :return: The loaded data as a dictionary.
        """
        if os.path.exists(self.db_file):
            try:
                with open(self.db_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError("Invalid profile store format: Expected a dictionary.")
                data.setdefault("profiles", {})
                return data
            except (json.JSONDecodeError, ValueError) as e:
                logger.error("Invalid profile store, reinitializing", path=self.db_file, error=str(e))
                self.create_backup()

        return {"profiles": {}}

    def _save_data(self) -> None:
        """
        Save data to the JSON file.

        :raises IOError: If there is an error writing to the file.
        """
        try:
            with open(self.db_file, "w", encoding="utf-8") as f:
                json.dump(self.data, f, indent=2)
            logger.debug("Profile store saved", path=self.db_file)
        except IOError as e:
            logger.error("Failed to save profile store", path=self.db_file, error=str(e))
            raise

    def _build_profile(self, name: str, record: Dict[str, Any]) -> ConnectionProfile:
        try:
            return ConnectionProfile(**{**record, "name": name})
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Profile '{name}' in {self.db_file} is invalid: {e}",
                error_code="INVALID_PROFILE",
                details={"profile_name": name},
            ) from e

    def get_profile(self, name: str) -> ConnectionProfile:
        record = self.data["profiles"].get(name)
        if record is None:
            raise ProfileNotFoundError(name)
        return self._build_profile(name, record)

    def list_profiles(self) -> List[ConnectionProfile]:
        return [self._build_profile(name, record) for name, record in sorted(self.data["profiles"].items())]

    def add_profile(self, profile: ConnectionProfile) -> None:
        if profile.name in self.data["profiles"]:
            raise ValueError(f"Profile already exists: {profile.name}")
        self.data["profiles"][profile.name] = self._record(profile)
        self._save_data()
        logger.info("Profile added", profile=profile.name)

    def update_profile(self, profile: ConnectionProfile) -> None:
        if profile.name not in self.data["profiles"]:
            raise ProfileNotFoundError(profile.name)
        self.data["profiles"][profile.name] = self._record(profile)
        self._save_data()
        logger.info("Profile updated", profile=profile.name)

    def remove_profile(self, name: str) -> None:
        if name not in self.data["profiles"]:
            raise ProfileNotFoundError(name)
        del self.data["profiles"][name]
        self._save_data()
        logger.info("Profile removed", profile=name)

    @staticmethod
    def _record(profile: ConnectionProfile) -> Dict[str, Any]:
        record = profile.to_dict()
        record.pop("name", None)
        return record

    def create_backup(self) -> str:
        """
        Create a backup of the current profiles file.

        :return: The path of the created backup file.
        """
        timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
        backup_path = f"{self.db_file}.backup.{timestamp}"
        shutil.copy(self.db_file, backup_path)
        logger.warning("Profile store backup created", path=backup_path)
        return backup_path
