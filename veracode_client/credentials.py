"""
Veracode API credentials and the ``~/.veracode/credentials`` file.

The credentials file is an INI file; each profile section holds
``veracode_api_key_id`` and ``veracode_api_key_secret``.
"""

import configparser
import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from .constants import (
    CREDENTIALS_DIR,
    CREDENTIALS_FILE,
    KEY_ID_OPTION,
    KEY_SECRET_OPTION,
    PROFILE_ENV_VAR,
)
from .exceptions import ConfigurationError

DEFAULT_PROFILE = "default"


@dataclass(frozen=True)
class Credential:
    """API key id and hex encoded secret. Either may carry a region prefix."""

    key_id: str
    key_secret: str = field(repr=False)

    def __post_init__(self):
        if not self.key_id:
            raise ConfigurationError("API key id cannot be empty")
        if not self.key_secret:
            raise ConfigurationError("API key secret cannot be empty")

    @property
    def masked_key_id(self) -> str:
        return f"****{self.key_id[-4:]}"


@dataclass(frozen=True)
class Profile:
    name: str
    credential: Credential


def get_credentials_file_path() -> str:
    """Return the path of the credentials file in the user's home directory."""
    return os.path.join(os.path.expanduser("~"), CREDENTIALS_DIR, CREDENTIALS_FILE)


def _read_config(path: str) -> configparser.ConfigParser:
    parser = configparser.ConfigParser(interpolation=None)
    try:
        with open(path, encoding="utf-8") as f:
            parser.read_file(f)
    except OSError as e:
        raise ConfigurationError(f"error loading credentials file {path}: {e}") from e
    except configparser.Error as e:
        raise ConfigurationError(f"error parsing credentials file {path}: {e}") from e
    return parser


def _section_to_profile(name: str, section) -> Optional[Profile]:
    key_id = section.get(KEY_ID_OPTION, "").strip()
    key_secret = section.get(KEY_SECRET_OPTION, "").strip()
    if not key_id or not key_secret:
        return None
    return Profile(name=name, credential=Credential(key_id, key_secret))


def get_profiles(path: Optional[str] = None) -> Dict[str, Profile]:
    """Return every profile of the credentials file that holds both keys."""
    parser = _read_config(path or get_credentials_file_path())

    profiles = {}
    for name in parser.sections():
        profile = _section_to_profile(name, parser[name])
        if profile is not None:
            profiles[name] = profile
    return profiles


def load_credentials(path: Optional[str] = None, profile: Optional[str] = None) -> Credential:
    """
    Load the API credentials of one profile.

    The profile is taken from the argument, else from the
    VERACODE_API_PROFILE environment variable, else "default". A file that
    only has keys outside of any named section is used as is.

    Raises:
        ConfigurationError: If the file, the profile or its keys are missing
    """
    path = path or get_credentials_file_path()
    parser = _read_config(path)

    if not parser.sections() and parser.defaults():
        section = parser[configparser.DEFAULTSECT]
        name = configparser.DEFAULTSECT
    else:
        name = profile or os.environ.get(PROFILE_ENV_VAR) or DEFAULT_PROFILE
        if not parser.has_section(name):
            raise ConfigurationError(f"error loading profile: {name} from file {path}")
        section = parser[name]

    loaded = _section_to_profile(name, section)
    if loaded is None:
        raise ConfigurationError(
            f"failed to load Veracode API credentials for profile {name} from file {path}"
        )
    return loaded.credential
