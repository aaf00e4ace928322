import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from coatcalc.rules.models import Rules

logger = logging.getLogger(__name__)

RULES_PATH_ENV = "COATCALC_RULES_PATH"
DEFAULT_RULES_FILE = "coatcalc_rules.yaml"


def load_rules(path: Path) -> Rules:
    """
    Load and validate the rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if the YAML or the schema is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    # An empty file means "all defaults"
    if data is None:
        data = {}

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e


def load_rules_or_default(path: Path | None = None) -> Rules:
    """
    Load rules from ``path``, $COATCALC_RULES_PATH, or ./coatcalc_rules.yaml.

    Falls back to built-in defaults when no file exists. An existing but
    invalid file still raises.
    """
    if path is None:
        path = Path(os.environ.get(RULES_PATH_ENV, DEFAULT_RULES_FILE))

    if not path.exists():
        logger.info("No rules file at %s, using defaults", path)
        return Rules()

    return load_rules(path)
