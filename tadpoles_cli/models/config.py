"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tadpoles_cli.utils.path import KEY, KEY_MD5

DEFAULT_IMAGE_PATH = "tadpoles/%child%/%YYYY%/%MM%"
DEFAULT_FILE_PATTERN = "%YYYY%-%MM%-%DD%_%keymd5%"
DEFAULT_BASE_URL = "https://www.tadpoles.com"


class ArchiveConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Authentication
    username: str = ""
    password: str = ""

    # Archive layout
    image_path: str = DEFAULT_IMAGE_PATH
    file_pattern: str = DEFAULT_FILE_PATTERN

    # Internal fields not loaded from INI file
    base_url: str = Field(DEFAULT_BASE_URL, repr=False)
    config_path: str = Field(..., repr=False)

    @field_validator("image_path")
    @classmethod
    def validate_image_path(cls, v: str) -> str:
        """Validates the output directory template."""
        if not v:
            raise ValueError("Image path template cannot be empty.")
        return v

    @field_validator("file_pattern")
    @classmethod
    def validate_file_pattern(cls, v: str) -> str:
        """
        Ensures each attachment gets its own file name; without a key placeholder
        every attachment of the same day would map onto one file.
        """
        if not v:
            raise ValueError("File pattern cannot be empty.")
        if "/" in v or "\\" in v:
            raise ValueError(
                "File pattern cannot contain path separators; use image_path."
            )
        if KEY_MD5 not in v and KEY not in v:
            raise ValueError(
                f"File pattern must contain at least {KEY_MD5} or {KEY}."
            )
        return v

    @model_validator(mode="after")
    def validate_credentials(self) -> "ArchiveConfig":
        """Validates that authentication settings are present."""
        if not self.username or not self.password:
            raise ValueError(
                "Authentication not configured. Provide a username and password."
            )
        return self

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path", "base_url"}
        return {key for key in cls.model_fields if key not in internal_fields}
