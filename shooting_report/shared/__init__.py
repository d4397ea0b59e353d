from shooting_report.shared.config import Settings, get_config, get_dataset_config
from shooting_report.shared.errors import DataQualityError, ReportError, SchemaError

__all__ = [
    "get_config",
    "get_dataset_config",
    "Settings",
    "ReportError",
    "SchemaError",
    "DataQualityError",
]
