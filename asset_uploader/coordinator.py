"""
Module for coordinating a presigned multipart upload from plan to completion.
"""
import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List, Optional

from .config import UploadConfig
from .control_plane import ControlPlaneClient
from .errors import CompletionError, PartTransferError, PlanError, TransferError, UploadError
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

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[UploadProgress], None]


class UploadOrchestrator:
    """Drives one upload through planning, transfer and completion.

    Parts are uploaded concurrently on a bounded thread pool. The completion
    call is only made once every part has an ETag; any part failure moves the
    upload to FAILED and the part list is never reported.
    """

    def __init__(self, config: UploadConfig,
                 control_plane: Optional[ControlPlaneClient] = None,
                 uploader: Optional[PartUploader] = None,
                 header_builder: Optional[TransferHeaderBuilder] = None):
        """Initialize the upload orchestrator.

        Args:
            config: Uploader configuration
            control_plane: Client for the signed-URL and completion endpoints
            uploader: Part uploader for presigned storage URLs
            header_builder: Builds per-part transfer headers
        """
        self.config = config
        self.control_plane = control_plane or ControlPlaneClient(config)
        self.uploader = uploader or PartUploader(timeout=config.part_timeout)
        self.header_builder = header_builder or TransferHeaderBuilder()
        self._callback: Optional[ProgressCallback] = None

    def __enter__(self) -> "UploadOrchestrator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP clients."""
        self.control_plane.close()
        self.uploader.close()

    def register_callback(self, callback: ProgressCallback) -> None:
        """Register a callback to be called after each part finishes.

        Args:
            callback: Function called with an UploadProgress snapshot
        """
        self._callback = callback

    def upload(self, file: FileMetadata) -> UploadResult:
        """Upload a file and finalize it with the control plane.

        Args:
            file: The file to upload

        Returns:
            UploadResult in state DONE, or FAILED with a typed error naming
            the stage that failed
        """
        state = UploadState.PLANNING
        logger.info(f"Uploading {file.name} ({file.size} bytes, {file.mime_type})")

        try:
            plan = self.control_plane.request_part_plan(file)
            plan.validate(file.size)
        except PlanError as e:
            return self._fail(file, state, e)

        state = self._transition(plan, state, UploadState.TRANSFERRING)
        try:
            uploaded = self._transfer_parts(plan, ByteRangeSource(file.content))
        except TransferError as e:
            return self._fail(file, state, e, plan)

        state = self._transition(plan, state, UploadState.COMPLETING)
        request = CompletionRequest.from_parts(plan.upload_id, uploaded.values())
        try:
            self.control_plane.report_uploaded(plan, request)
        except CompletionError as e:
            return self._fail(file, state, e, plan)

        state = self._transition(plan, state, UploadState.DONE)
        logger.info(f"Success: uploaded all {len(request.parts)} parts of {file.name}")
        return UploadResult(
            file_name=file.name,
            state=state,
            asset_id=plan.asset_id,
            upload_id=plan.upload_id,
            parts=list(request.parts),
        )

    def _transfer_parts(self, plan: PartPlan,
                        source: ByteRangeSource) -> Dict[int, UploadedPart]:
        """Upload every part of the plan and join on the results.

        Args:
            plan: Validated part plan
            source: Byte source for the file content

        Returns:
            Uploaded parts keyed by part number

        Raises:
            TransferError: If any part failed, listing every observed failure
        """
        uploaded: Dict[int, UploadedPart] = {}
        failures: List[PartTransferError] = []
        bytes_uploaded = 0
        cancelling = False
        workers = min(self.config.max_concurrency, len(plan.parts))

        with ThreadPoolExecutor(max_workers=workers,
                                thread_name_prefix=f"part-{plan.asset_id}") as executor:
            future_to_part: Dict[Future, PartSpec] = {
                executor.submit(self._upload_part, part, source): part
                for part in plan.parts
            }

            for future in as_completed(future_to_part):
                part = future_to_part[future]
                if future.cancelled():
                    continue

                try:
                    result = future.result()
                except PartTransferError as e:
                    failures.append(e)
                except Exception as e:
                    logger.error(f"Unexpected error uploading part {part.part_number}: {e}")
                    failures.append(PartTransferError(part.part_number, f"unexpected error: {e}"))
                else:
                    uploaded[part.part_number] = result
                    bytes_uploaded += part.size

                if failures and not cancelling:
                    cancelling = True
                    cancelled = sum(f.cancel() for f in future_to_part)
                    if cancelled:
                        logger.warning(f"Cancelled {cancelled} pending parts after a failure")

                self._notify(UploadProgress(
                    asset_id=plan.asset_id,
                    total_parts=len(plan.parts),
                    completed_parts=len(uploaded),
                    failed_parts=len(failures),
                    bytes_uploaded=bytes_uploaded,
                    total_bytes=plan.total_bytes,
                ))

        if failures:
            failures.sort(key=lambda f: f.part_number)
            numbers = ", ".join(str(f.part_number) for f in failures)
            raise TransferError(
                f"{len(failures)} of {len(plan.parts)} parts failed (parts {numbers})",
                failures,
            )
        if len(uploaded) != len(plan.parts):
            raise TransferError(
                f"only {len(uploaded)} of {len(plan.parts)} parts were uploaded"
            )
        return uploaded

    def _upload_part(self, part: PartSpec, source: ByteRangeSource) -> UploadedPart:
        data = source.slice(part.start, part.end).tobytes()
        headers = self.header_builder.build(data)
        return self.uploader.upload(part, headers, data)

    def _notify(self, progress: UploadProgress) -> None:
        if not self._callback:
            return
        try:
            self._callback(progress)
        except Exception as e:
            logger.error(f"Error in progress callback for asset {progress.asset_id}: {e}")

    def _transition(self, plan: PartPlan, current: UploadState,
                    new: UploadState) -> UploadState:
        logger.info(f"Asset {plan.asset_id}: {current.value} -> {new.value}")
        return new

    def _fail(self, file: FileMetadata, current: UploadState, error: UploadError,
              plan: Optional[PartPlan] = None) -> UploadResult:
        logger.error(f"Upload of {file.name} failed during {current.value}: {error}")
        if isinstance(error, TransferError):
            for failure in error.failures:
                logger.error(
                    f"  part {failure.part_number}: status={failure.status_code} "
                    f"body={failure.body!r}"
                )
        return UploadResult(
            file_name=file.name,
            state=UploadState.FAILED,
            asset_id=plan.asset_id if plan else None,
            upload_id=plan.upload_id if plan else None,
            error=error,
        )
