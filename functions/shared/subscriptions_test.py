# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import unittest
from unittest.mock import MagicMock

from shared.subscriptions import Signal, Subscription


class SubscriptionTest(unittest.TestCase):
    def test_unsubscribe_runs_once(self):
        release = MagicMock()
        subscription = Subscription(release)

        subscription.unsubscribe()
        subscription.unsubscribe()

        release.assert_called_once_with()
        self.assertFalse(subscription.active)

    def test_context_manager(self):
        release = MagicMock()
        with Subscription(release) as subscription:
            self.assertTrue(subscription.active)
        release.assert_called_once_with()

    def test_without_callback(self):
        subscription = Subscription()
        subscription.unsubscribe()
        self.assertFalse(subscription.active)


class SignalTest(unittest.TestCase):
    def test_emit_reaches_subscribers_until_unsubscribed(self):
        signal = Signal("test")
        first, second = [], []
        subscription = signal.subscribe(first.append)
        signal.subscribe(second.append)

        signal.emit(1)
        subscription.unsubscribe()
        signal.emit(2)

        self.assertEqual(first, [1])
        self.assertEqual(second, [1, 2])
        self.assertEqual(signal.subscriber_count, 1)

    def test_clear(self):
        signal = Signal()
        received = []
        subscription = signal.subscribe(received.append)

        signal.clear()
        signal.emit(1)
        subscription.unsubscribe()

        self.assertEqual(received, [])


if __name__ == "__main__":
    unittest.main()
