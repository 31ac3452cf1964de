"""
Response Validation
===================

Assertion helpers for API responses. Failures raise ``AssertionError``
so pytest reports them as test failures.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from harness.api.client import ApiResponse

ModelT = TypeVar("ModelT", bound=BaseModel)


class ResponseValidator:
    """Static checks on an :class:`ApiResponse`."""

    @staticmethod
    def expect_status(response: ApiResponse, expected: int) -> None:
        if response.status != expected:
            raise AssertionError(
                f"Expected status {expected}, but got {response.status}. "
                f"Response body: {response.text()}"
            )

    @staticmethod
    def json(response: ApiResponse) -> Any:
        return response.json()

    @staticmethod
    def validate_model(response: ApiResponse, model: type[ModelT]) -> ModelT:
        """
        Validate the JSON body against a pydantic model.

        Returns:
            The parsed model instance.

        Raises:
            AssertionError: If the body does not match the model.
        """
        try:
            return model.model_validate(response.json())
        except ValidationError as e:
            raise AssertionError(f"Schema validation failed: {e}") from e
