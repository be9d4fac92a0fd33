from .config import UploadConfig, load_config
from .control_plane import ControlPlaneClient
from .coordinator import UploadOrchestrator
from .errors import (
    CompletionError,
    ConfigError,
    InvalidRange,
    PartTransferError,
    PlanError,
    TransferError,
    UploadError,
)
from .headers import TransferHeaderBuilder
from .models import (
    CompletionRequest,
    FileMetadata,
    PartPlan,
    PartSpec,
    UploadedPart,
    UploadProgress,
    UploadResult,
    UploadState,
)
from .source import ByteRangeSource
from .uploader import PartUploader

__version__ = "0.1.0"

__all__ = [
    "UploadOrchestrator",
    "UploadConfig",
    "load_config",
    "ControlPlaneClient",
    "PartUploader",
    "TransferHeaderBuilder",
    "ByteRangeSource",
    "FileMetadata",
    "PartPlan",
    "PartSpec",
    "UploadedPart",
    "CompletionRequest",
    "UploadProgress",
    "UploadResult",
    "UploadState",
    "UploadError",
    "ConfigError",
    "InvalidRange",
    "PlanError",
    "TransferError",
    "PartTransferError",
    "CompletionError",
]
