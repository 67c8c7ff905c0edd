"""
Explorer "Script as..." templates
"""

from .script_templates import ScriptTemplate, build_script

__all__ = ["ScriptTemplate", "build_script"]
