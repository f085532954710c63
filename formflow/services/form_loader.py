"""Form loader service with caching and validation.

This module loads form definitions from YAML files, validates them against
Pydantic schemas, lints their skip logic, and caches the results. Loaded
forms are frozen and can be shared between respondent sessions.
"""

from pathlib import Path
from functools import lru_cache
from typing import Optional
import yaml
from pydantic import ValidationError

from formflow.config import get_settings
from formflow.schemas.form import Form, Question
from formflow.services.form_validator import FormValidator
from formflow.logging_config import get_logger

logger = get_logger(__name__)


class FormNotFoundError(Exception):
    """Raised when a form file is not found."""
    pass


class FormValidationError(Exception):
    """Raised when a form fails validation."""
    pass


class FormLoader:
    """Service for loading and caching form definitions.

    Forms are loaded from YAML files in the forms directory and validated
    against Pydantic schemas. Results are cached for performance.
    """

    def __init__(self, forms_dir: Optional[str] = None):
        """Initialize form loader.

        Args:
            forms_dir: Path to forms directory (defaults to ./forms in the
                project root)
        """
        if forms_dir is None:
            project_root = Path(__file__).parent.parent.parent
            forms_dir = project_root / "forms"

        self.forms_dir = Path(forms_dir)

        if not self.forms_dir.exists():
            logger.warning(f"Forms directory not found: {self.forms_dir}")

    @lru_cache(maxsize=128)
    def load_form(self, form_id: str) -> Form:
        """Load and validate a form from YAML file.

        Results are cached. Clear the cache with clear_cache() after
        editing form files at runtime.

        Args:
            form_id: Form identifier (matches YAML filename without .yaml)

        Returns:
            Validated Form object

        Raises:
            FormNotFoundError: If form file doesn't exist
            FormValidationError: If form fails validation

        Example:
            >>> loader = FormLoader()
            >>> form = loader.load_form("customer_feedback")
            >>> print(form.metadata.title)
            'Customer Feedback'
        """
        yaml_path = self.forms_dir / f"{form_id}.yaml"

        if not yaml_path.exists():
            logger.error(f"Form file not found: {yaml_path}")
            raise FormNotFoundError(f"Form '{form_id}' not found at {yaml_path}")

        try:
            with open(yaml_path, 'r') as f:
                raw_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error for {form_id}: {e}")
            raise FormValidationError(f"Invalid YAML in form '{form_id}': {e}")
        except OSError as e:
            logger.error(f"Error reading form file {yaml_path}: {e}")
            raise FormValidationError(f"Error reading form '{form_id}': {e}")

        if not isinstance(raw_data, dict):
            logger.error(f"Form file {yaml_path} does not contain a mapping")
            raise FormValidationError(f"Validation failed for form '{form_id}': expected a mapping")

        try:
            form = Form(**raw_data)
        except ValidationError as e:
            logger.error(f"Validation error for form {form_id}: {e}")
            raise FormValidationError(f"Validation failed for form '{form_id}': {e}")

        FormValidator.validate(form)
        logger.info(f"Successfully loaded form: {form_id} (version {form.metadata.version})")
        return form

    def get_question(self, form: Form, question_id: int) -> Optional[Question]:
        """Get a specific question from a form.

        Args:
            form: Form object
            question_id: Question identifier

        Returns:
            Question if found, None otherwise
        """
        return form.get_question(question_id)

    def list_forms(self) -> list[str]:
        """List all available form IDs.

        Returns:
            Sorted list of form IDs (filenames without .yaml extension)
        """
        if not self.forms_dir.exists():
            return []

        form_ids = [f.stem for f in self.forms_dir.glob("*.yaml")]

        logger.debug(f"Found {len(form_ids)} forms: {form_ids}")
        return sorted(form_ids)

    def clear_cache(self):
        """Clear the form cache."""
        self.load_form.cache_clear()
        logger.info("Form cache cleared")


# Global singleton instance
_loader_instance: Optional[FormLoader] = None


def get_form_loader() -> FormLoader:
    """Get global FormLoader instance.

    Creates singleton instance on first call, rooted at the configured
    forms directory.

    Returns:
        Global FormLoader instance
    """
    global _loader_instance
    if _loader_instance is None:
        _loader_instance = FormLoader(get_settings().forms_dir)
    return _loader_instance
