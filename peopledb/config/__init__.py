"""Configuration package.

Note: Import settings from ``peopledb.config.settings`` directly where needed
so that tests can reload the module after patching the environment.
"""

__all__: list[str] = []
