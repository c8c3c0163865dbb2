"""Resolve engine classes by naming convention.

An engine "<engine>" of a family lives at "<package>.<engine>.<Prefix><Engine>" and
defines a class of the same name, e.g. shared.clients.llm.anthropic.LLMClientAnthropic.
"""

import importlib


def load_engine_class(package: str, class_prefix: str, engine: str) -> type:
    """Import and return the class implementing an engine.

    Args:
        package (str): Family package, e.g. "shared.clients.llm".
        class_prefix (str): Class name prefix, e.g. "LLMClient".
        engine (str): Engine name in any case, e.g. "anthropic".

    Returns:
        type: The engine class.

    Raises:
        ValueError: If the module or class cannot be found.
    """
    engine = engine.strip().lower()
    if not engine:
        raise ValueError(f"No engine configured for {class_prefix}.")
    class_name = f"{class_prefix}{engine.capitalize()}"
    try:
        module = importlib.import_module(f"{package}.{engine}.{class_name}")
        return getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        raise ValueError("Unsupported engine '%s' for %s. Error: %s" % (engine, class_prefix, e))
