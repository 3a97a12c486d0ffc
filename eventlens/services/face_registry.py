"""Face registry port and its AWS Rekognition implementation.

The registry is consumed as a black box: it can register a face for a
user, detect faces in an image and search an image against registered
faces. Everything Rekognition-specific stays in ``RekognitionFaceRegistry``.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from eventlens.core.config import settings
from eventlens.core.errors import ExternalServiceError, InvalidInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundingRegion:
    """Face box relative to the image size (0.0-1.0)."""

    width: float
    height: float
    left: float
    top: float


@dataclass(frozen=True)
class DetectedRegion:
    """A face found in an image, not yet matched to anyone."""

    bounding_region: BoundingRegion
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FaceMatch:
    """A registered signature matching a face in a query image."""

    signature_id: str
    external_user_id: str
    bounding_region: BoundingRegion
    confidence: float


class FaceRegistry(Protocol):
    def register(self, user_id: str, image_bytes: bytes) -> str: ...

    def detect(self, image_bytes: bytes) -> list[DetectedRegion]: ...

    def search(self, image_bytes: bytes) -> list[FaceMatch]: ...


@lru_cache(maxsize=1)
def get_rekognition_client() -> Any:
    """
    Get AWS Rekognition client.

    Uses lru_cache to reuse the client instance. Credentials come from the
    environment (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY) or an IAM role.
    """
    return boto3.client("rekognition", region_name=settings.aws_region)


def _region(box: dict[str, float] | None) -> BoundingRegion:
    box = box or {}
    return BoundingRegion(
        width=box.get("Width", 0.0),
        height=box.get("Height", 0.0),
        left=box.get("Left", 0.0),
        top=box.get("Top", 0.0),
    )


class RekognitionFaceRegistry:
    """Face registry backed by a Rekognition face collection.

    Search results are thresholded server-side at ``threshold`` similarity
    and capped at ``max_results`` matches.
    """

    def __init__(
        self,
        collection_id: str,
        threshold: float = 90.0,
        max_results: int = 5,
        client: Any = None,
    ) -> None:
        self.collection_id = collection_id
        self.threshold = threshold
        self.max_results = max_results
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = get_rekognition_client()
        return self._client

    def _call(self, operation: str, **params: Any) -> dict[str, Any]:
        """Invoke a Rekognition operation, translating AWS errors."""
        try:
            return getattr(self.client, operation)(**params)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            error_message = e.response.get("Error", {}).get("Message", str(e))
            logger.error(f"Rekognition {operation} failed: {error_code} - {error_message}")
            raise ExternalServiceError(f"Face registry error: {error_message}") from e
        except BotoCoreError as e:
            logger.error(f"Rekognition {operation} failed: {e}")
            raise ExternalServiceError(f"Face registry error: {e}") from e

    def ensure_collection(self) -> None:
        """Create the face collection if it doesn't exist."""
        try:
            self.client.describe_collection(CollectionId=self.collection_id)
            logger.info(f"Collection {self.collection_id} already exists")
            return
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") != "ResourceNotFoundException":
                raise ExternalServiceError(f"Face registry error: {e}") from e
        except BotoCoreError as e:
            raise ExternalServiceError(f"Face registry error: {e}") from e

        self._call("create_collection", CollectionId=self.collection_id)
        logger.info(f"Collection {self.collection_id} created")

    def register(self, user_id: str, image_bytes: bytes) -> str:
        """Index the most prominent face in the image under ``user_id``."""
        response = self._call(
            "index_faces",
            CollectionId=self.collection_id,
            Image={"Bytes": image_bytes},
            ExternalImageId=user_id,
            DetectionAttributes=["ALL"],
            MaxFaces=1,
        )
        records = response.get("FaceRecords", [])
        if not records:
            raise InvalidInput("No face detected in image")
        return records[0]["Face"]["FaceId"]

    def detect(self, image_bytes: bytes) -> list[DetectedRegion]:
        response = self._call(
            "detect_faces",
            Image={"Bytes": image_bytes},
            Attributes=["ALL"],
        )
        return [
            DetectedRegion(
                bounding_region=_region(detail.get("BoundingBox")),
                attributes={k: v for k, v in detail.items() if k != "BoundingBox"},
            )
            for detail in response.get("FaceDetails", [])
        ]

    def search(self, image_bytes: bytes) -> list[FaceMatch]:
        response = self._call(
            "search_faces_by_image",
            CollectionId=self.collection_id,
            Image={"Bytes": image_bytes},
            MaxFaces=self.max_results,
            FaceMatchThreshold=self.threshold,
        )
        # Rekognition searches the largest face in the query image, so every
        # match shares the searched face's box.
        searched = _region(response.get("SearchedFaceBoundingBox"))
        return [
            FaceMatch(
                signature_id=match["Face"]["FaceId"],
                external_user_id=match["Face"].get("ExternalImageId", ""),
                bounding_region=searched,
                confidence=match["Similarity"],
            )
            for match in response.get("FaceMatches", [])
        ]
