# SPDX-License-Identifier: Apache-2.0
"""
Loadbridge tests.

Unit tests run against an in-memory fake of the weaviate-client connection
(tests/mock). The suite under tests/live talks to a real database and runs
only when LOADBRIDGE_LIVE_HOST is set.
"""
