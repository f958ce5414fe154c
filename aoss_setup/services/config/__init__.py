"""Configuration package (Facade).

This package acts as a small *Facade* over the underlying configuration modules.
Instead of requiring callers to know the exact module that defines each config
object (for example, ``aws_config.py``), we re-export the public config
types here so the rest of the codebase can import from a single, stable path:

	from aoss_setup.services.config import AwsConfig

Benefits:
- Keeps imports consistent and shorter.
- Allows internal module layout changes without touching all call sites.
- Clearly defines the public API of this package (via ``__all__``).
"""

from aoss_setup.services.config.aws_config import AwsConfig
from aoss_setup.services.config.opensearch_config import OpenSearchConfig
from aoss_setup.services.config.pipeline_config import PipelineConfig

__all__ = ["AwsConfig", "OpenSearchConfig", "PipelineConfig"]
