"""
Module for talking to the control plane that brokers presigned part URLs.
"""
import logging
from typing import Any, List, Optional

import httpx

from .config import UploadConfig
from .errors import CompletionError, PlanError
from .models import CompletionRequest, FileMetadata, PartPlan, PartSpec

logger = logging.getLogger(__name__)


def _require(mapping: Any, key: str, kind: type, where: str) -> Any:
    if not isinstance(mapping, dict) or key not in mapping:
        raise PlanError(f"{where} is missing '{key}'")
    value = mapping[key]
    # bool is an int subclass but never a valid offset or part number
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise PlanError(f"{where} field '{key}' has unexpected type {type(value).__name__}")
    return value


def parse_part_plan(payload: Any, size: int) -> PartPlan:
    """Parse and validate a signed-URL response into a PartPlan.

    Args:
        payload: Decoded JSON body of the signed-URL response
        size: Size of the file the plan must cover

    Returns:
        Validated PartPlan

    Raises:
        PlanError: If the payload is malformed, the part numbers are not
            1..n in order, or the ranges do not exactly cover [0, size)
    """
    if not isinstance(payload, dict):
        raise PlanError("signed response is not a JSON object")

    asset_id = payload.get("id")
    if isinstance(asset_id, bool) or not isinstance(asset_id, (str, int)) or asset_id == "":
        raise PlanError("signed response is missing 'id'")
    upload_id = _require(payload, "upload_id", str, "signed response")
    if not upload_id:
        raise PlanError("signed response has an empty 'upload_id'")
    urls = _require(payload, "urls", list, "signed response")
    if not urls:
        raise PlanError("signed response has no parts")

    parts: List[PartSpec] = []
    for index, entry in enumerate(urls, start=1):
        where = f"part entry {index}"
        parts.append(PartSpec(
            part_number=_require(entry, "part", int, where),
            start=_require(entry, "start", int, where),
            end=_require(entry, "end", int, where),
            url=_require(entry, "url", str, where),
        ))

    plan = PartPlan(upload_id=upload_id, asset_id=str(asset_id), parts=tuple(parts))
    plan.validate(size)
    return plan


class ControlPlaneClient:
    """Client for the signed-URL and upload-completion endpoints."""

    def __init__(self, config: UploadConfig, client: Optional[httpx.Client] = None):
        """Initialize the control plane client.

        Args:
            config: Uploader configuration with token and base URL
            client: Optional preconfigured HTTP client, mainly for tests
        """
        self.config = config
        self.client = client or httpx.Client(timeout=config.request_timeout)
        self._headers = {"Authorization": f"Bearer {config.access_token}"}
        self._base_url = config.base_url.rstrip("/") + "/"

    def close(self) -> None:
        self.client.close()

    def _post(self, path: str, body: dict) -> httpx.Response:
        return self.client.post(self._base_url + path, json=body, headers=self._headers)

    def request_part_plan(self, file: FileMetadata) -> PartPlan:
        """Ask the control plane for presigned part URLs.

        Args:
            file: The file being uploaded

        Returns:
            Validated PartPlan covering the whole file

        Raises:
            PlanError: If the request fails or the response is invalid
        """
        body = {"name": file.name, "size": file.size, "mime": file.mime_type}
        try:
            response = self._post("assets/signed", body)
        except httpx.HTTPError as e:
            raise PlanError(f"signed-URL request failed: {e}") from e

        if not response.is_success:
            raise PlanError(
                f"signed-URL request returned {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise PlanError(
                "signed response is not valid JSON",
                status_code=response.status_code,
                body=response.text,
            ) from e

        logger.debug(f"Signed response: {payload}")
        plan = parse_part_plan(payload, file.size)
        logger.info(f"Received {len(plan.parts)} part URLs for asset {plan.asset_id}")
        return plan

    def report_uploaded(self, plan: PartPlan, request: CompletionRequest) -> None:
        """Report the uploaded part list so the control plane can finalize the object.

        Args:
            plan: The part plan the parts were uploaded against
            request: Completed part list

        Raises:
            CompletionError: If the request fails or is rejected
        """
        payload = request.to_payload()
        logger.debug(f"Completing asset {plan.asset_id} with {payload}")
        try:
            response = self._post(f"assets/{plan.asset_id}/uploaded", payload)
        except httpx.HTTPError as e:
            raise CompletionError(f"completion request failed: {e}") from e

        if not response.is_success:
            raise CompletionError(
                f"completion request returned {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
