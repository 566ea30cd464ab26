"""
Merge conflict auto-resolution.

Categorizes conflicting paths, resolves the supported ones, and drives
the convergence loop against the host (see prbot.merge.engine).
"""
