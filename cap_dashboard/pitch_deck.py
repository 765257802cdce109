"""Pitch deck upload and analysis.

The pipeline runs three stages in order and stops at the first failure:
store the PDF, record it in ``files``, then ask the analysis function for a
report. An object that was already stored is left in place when a later stage
fails.
"""
from __future__ import annotations
import logging
import re
import uuid
from dataclasses import dataclass
from typing import Any, Optional

import requests

from .client import QueryClient
from .config import MEBIBYTE, Settings
from .exceptions import AnalysisError, ValidationError
from .session import AuthSession, require_session

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
ANALYZE_PATH = "/functions/v1/analyze-pitch-deck"
DEFAULT_ANALYSIS_ERROR = "Failed to analyze pitch deck"


@dataclass
class DeckUpload:
    name: str
    mime_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def size_label(self) -> str:
        return f"{self.size / MEBIBYTE:.2f}MB"

    @classmethod
    def from_uploaded_file(cls, uploaded: Any) -> "DeckUpload":
        return cls(name=uploaded.name, mime_type=uploaded.type or "", data=uploaded.getvalue())


@dataclass
class PitchDeckResult:
    file_id: str
    storage_path: str
    analysis_id: str


def validate_pitch_deck(name: str, mime_type: str, size: int, max_bytes: int = 10 * MEBIBYTE) -> None:
    if mime_type != PDF_MIME:
        raise ValidationError("Invalid file type", "Please upload a PDF file.", field="file")
    if size > max_bytes:
        raise ValidationError("File too large", f"Please upload a file smaller than {max_bytes // MEBIBYTE}MB.", field="file")
    if not (name or "").strip():
        raise ValidationError("No file selected", "Please select a file to upload.", field="file")


def storage_key(file_name: str) -> str:
    normalized = re.sub(r"\s+", "_", file_name)
    return f"{uuid.uuid4()}-{normalized}"


def _error_message(response: Any) -> str:
    try:
        body = response.json()
    except ValueError:
        return DEFAULT_ANALYSIS_ERROR
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return DEFAULT_ANALYSIS_ERROR


def request_analysis(file_id: str, session: AuthSession, settings: Settings, http: Any = requests) -> str:
    url = f"{settings.functions_base_url}{ANALYZE_PATH}"
    try:
        response = http.post(
            url,
            json={"fileId": file_id},
            headers={"Content-Type": "application/json", "Authorization": f"Bearer {session.access_token}"},
            timeout=settings.REQUEST_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"Analysis request for file {file_id} failed: {e}")
        raise AnalysisError(str(e) or DEFAULT_ANALYSIS_ERROR) from e

    if not 200 <= response.status_code < 300:
        message = _error_message(response)
        logger.error(f"Analysis for file {file_id} returned {response.status_code}: {message}")
        raise AnalysisError(message, status_code=response.status_code)

    try:
        analysis_id = response.json()["analysis"]["id"]
    except (ValueError, KeyError, TypeError) as e:
        raise AnalysisError("Analysis response did not include an analysis id", status_code=response.status_code) from e
    return str(analysis_id)


def upload_and_analyze(
    client: QueryClient,
    session: Optional[AuthSession],
    upload: Optional[DeckUpload],
    settings: Settings,
    http: Any = requests,
    owner: Optional[str] = None,
) -> PitchDeckResult:
    if upload is None:
        raise ValidationError("No file selected", "Please select a file to upload.", field="file")
    validate_pitch_deck(upload.name, upload.mime_type, upload.size, settings.MAX_UPLOAD_BYTES)
    session = require_session(session)

    path = storage_key(upload.name)
    client.store(settings.PITCH_DECK_BUCKET, path, upload.data, PDF_MIME)

    file_row = client.insert("files", {
        "name": upload.name,
        "storage_path": path,
        "file_type": PDF_MIME,
        "file_size": upload.size_label,
        "owner": owner or session.email or "Current User",
    })
    file_id = str(file_row["id"])
    logger.info(f"Recorded pitch deck {upload.name} as file {file_id}")

    analysis_id = request_analysis(file_id, session, settings, http=http)
    logger.info(f"Pitch deck {file_id} analysed as {analysis_id}")
    return PitchDeckResult(file_id=file_id, storage_path=path, analysis_id=analysis_id)
