import enum


class StateType(str, enum.Enum):
    ERROR = "error"
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"
    HELPER = "helper"
    EMPTY = "empty"
    ACCESSIBILITY = "accessibility"
    OTHER = "other"


class CopyMode(str, enum.Enum):
    MESSAGE = "message"
    TITLE_MESSAGE = "title-message"


class ExportFormat(str, enum.Enum):
    TEXT = "text"
    JSON = "json"


class Lang(str, enum.Enum):
    EN = "en"
    RU = "ru"
