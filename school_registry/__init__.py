# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School Registry - schools, students and the enrollment link between them."""

__version__ = "1.0.0"
