# ─────────────────────────────────────────────────────────────────
# models.py — Data Models (Pydantic Schemas)
#
# All data shapes live here: the camera's configuration record,
# the partial update the companion app sends, and the event pushed
# to viewers when a new image arrives.
#
# The camera firmware and the Android app speak camelCase
# (phoneNumber, startHour). Python code uses snake_case and the
# camelCase names are declared as aliases, so the wire format and
# the config file on disk stay exactly what the devices expect.
# ─────────────────────────────────────────────────────────────────

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

# "+" followed by 9 to 15 digits, e.g. +261123456789
# [0-9] rather than \d so that non-ASCII digits are refused
PHONE_PATTERN = r"^\+[0-9]{9,15}$"


class ConfigRecord(BaseModel):
    """
    The single configuration record shared by the camera and the app.

    Every field is required: a record is either complete and valid
    or it is not a record at all. Loading a config file that fails
    this model means falling back to DEFAULT_CONFIG.
    """

    model_config = ConfigDict(populate_by_name=True)

    ssid: StrictStr                                              # Wi-Fi network name
    password: StrictStr                                          # Wi-Fi password
    phone_number: StrictStr = Field(alias="phoneNumber", pattern=PHONE_PATTERN)
    start_hour: StrictInt = Field(alias="startHour", ge=0, le=23)
    end_hour: StrictInt = Field(alias="endHour", ge=0, le=23)

    def to_wire(self) -> dict:
        """The camelCase dict used for JSON responses and the config file."""
        return self.model_dump(by_alias=True)


class ConfigUpdate(BaseModel):
    """
    Shape of the JSON body for POST /set-config — any subset of:
    {
        "ssid": "HomeNet",
        "password": "secret",
        "phoneNumber": "+261123456789",
        "startHour": 20,
        "endHour": 6
    }

    Absent fields keep their current value. A field that is present
    must be valid, and "null" is not a valid value for any of them.
    Unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    # Defaults are not validated by pydantic, so an absent field stays
    # None, while an explicit null fails the strict type check.
    ssid: StrictStr = None
    password: StrictStr = None
    phone_number: StrictStr = Field(None, alias="phoneNumber", pattern=PHONE_PATTERN)
    start_hour: StrictInt = Field(None, alias="startHour", ge=0, le=23)
    end_hour: StrictInt = Field(None, alias="endHour", ge=0, le=23)

    def changes(self) -> dict:
        """Only the fields the client actually sent, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


class NotificationEvent(BaseModel):
    """
    Pushed to every connected viewer after an image is stored.
    {
        "url": "/Uploads/capture_1718000000000.jpg",
        "timestamp": 1718000000123
    }
    """

    url: str         # locator the image can be fetched from
    timestamp: int   # epoch milliseconds when the upload completed


# Used on first start, and whenever the config file is missing or broken
DEFAULT_CONFIG = ConfigRecord(
    ssid="DEFAULT_SSID",
    password="DEFAULT_PASS",
    phone_number="+261000000000",
    start_hour=18,
    end_hour=6,
)
