"""Router configuration.

RouterConfig is a frozen dataclass: immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(base_path="/app")
    """

    # Prefix every handled URL must carry (normalized to "/app" form)
    base_path: str = ""

    # Debug records for transition start, supersede, refusal and correction
    transition_logging: bool = True
