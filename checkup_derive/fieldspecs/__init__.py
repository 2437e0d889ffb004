"""
Field specification tables sub-package for checkup-derive.

Contains YAML files that bind each derived variable to its rule and raw
input field names. The loader module (spec_registry.py in the parent
package) reads these files at runtime.
"""
