# SPDX-FileCopyrightText: Copyright (c) 2025 NBEL
# SPDX-License-Identifier: Apache-2.0

from .controller import (
    InteractionController,
    InteractionMode,
    InteractionState,
    nearest_node,
)

__all__ = [
    "InteractionController",
    "InteractionMode",
    "InteractionState",
    "nearest_node",
]
