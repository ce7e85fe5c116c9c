from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    debug: bool = False
    tag_table: str | None = None  # CSV file overriding the packaged tag-id -> name table
    type_table: str | None = None  # CSV file overriding the packaged type-code -> description table
    include_unknown: bool = False  # Emit tags missing from the tag table as Unknown_0x<HEX>_<DEC>
    suppress_derived: bool = False  # Skip the synthetic *PS entries and the file-object row
    skip_faulty: bool = False  # Drop entries that fail to decode instead of flagging them

    model_config = {
        "env_file": [".env"],
        "env_prefix": "IMGPROPS_",
        "extra": "ignore",
    }
