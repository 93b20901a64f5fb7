"""Response validation helpers shared by the service layer."""

from __future__ import annotations

import logging
from http import HTTPStatus

import requests

from todo_client.exceptions import ApiException

logger = logging.getLogger(__name__)


class ResponseValidator:
    """
    Validates the status code and Content-Type of HTTP responses.

    Raises ``ApiException`` on mismatch so every service method fails the
    same way, with the response body attached for diagnosis.
    """

    @staticmethod
    def validate_status_code(response: requests.Response, expected_status: HTTPStatus) -> None:
        """
        Validate that the response status code matches the expected one.

        Args:
            response: Response to validate.
            expected_status: Expected HTTP status.

        Raises:
            ApiException: If the status code does not match.
        """
        logger.info(
            "Validating status code: expected %s, actual %s",
            int(expected_status),
            response.status_code,
        )
        if response.status_code != expected_status:
            logger.error("Status code validation failed. Response: %s", response.text)
            raise ApiException(
                f"Expected status code {int(expected_status)} but got {response.status_code}. "
                f"Response: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

    @staticmethod
    def validate_content_type(response: requests.Response, expected_content_type: str) -> None:
        """
        Validate that the response media type matches the expected value.

        Parameters such as ``charset`` are ignored.

        Raises:
            ApiException: If the Content-Type does not match.
        """
        actual = response.headers.get("Content-Type", "")
        media_type = actual.split(";", 1)[0].strip().lower()
        logger.info(
            "Validating Content-Type: expected %s, actual %s", expected_content_type, actual
        )
        if media_type != expected_content_type.lower():
            logger.error("Content-Type validation failed. Response: %s", response.text)
            raise ApiException(
                f"Expected Content-Type {expected_content_type} but got {actual or '<none>'}. "
                f"Response: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
