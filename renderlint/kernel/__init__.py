"""renderlint kernel: parsing, detection rules, framework detection and reporting.

The kernel never reads configuration files or walks directories; those live
in ``renderlint.compiler``.
"""
