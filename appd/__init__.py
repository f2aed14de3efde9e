# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

__version__ = "0.1.0"
