# SPDX-License-Identifier: MIT
"""Core resolution model: descriptors, context, rules, graph and plans."""
