import json
import unittest
from unittest.mock import MagicMock, patch

from clawdvine_sdk.__main__ import main
from clawdvine_sdk.config import ClientConfig
from clawdvine_sdk.core.errors import InputError, PollingTimeout, RemoteJobFailure, SubmissionError
from clawdvine_sdk.core.models import GenerationResult

TEST_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


class TestCli(unittest.TestCase):
    def setUp(self):
        self.config = ClientConfig(evm_private_key=TEST_KEY)
        self.patchers = [
            patch("clawdvine_sdk.__main__.ClientConfig.from_env", return_value=self.config),
            patch("clawdvine_sdk.__main__.configure_logging"),
            patch("clawdvine_sdk.__main__.resolve_payment_session"),
            patch("clawdvine_sdk.__main__.GenerationClient"),
        ]
        mocks = [p.start() for p in self.patchers]
        self.mock_from_env = mocks[0]
        self.mock_resolve = mocks[2]
        self.mock_client_cls = mocks[3]
        self.mock_resolve.return_value.network = "base"
        self.client = self.mock_client_cls.return_value
        self.client.network = "base"

    def tearDown(self):
        for p in self.patchers:
            p.stop()

    def test_generate_success(self):
        self.client.run.return_value = GenerationResult(
            task_id="task-1", video="https://x/video.mp4", share_url="https://clawdvine.sh/media/task-1")
        with patch("sys.stdout") as out:
            code = main(["generate", "A sunset over mountains"])
        self.assertEqual(code, 0)
        request = self.client.run.call_args[0][0]
        self.assertEqual(request.model, "xai-grok-imagine")
        self.assertEqual(request.duration, 8)
        written = "".join(c[0][0] for c in out.write.call_args_list)
        self.assertIn("https://x/video.mp4", written)

    def test_generate_json_output(self):
        self.client.run.return_value = GenerationResult(
            task_id="task-1", video="v.mp4", share_url="https://clawdvine.sh/media/task-1", tx_hash="0xabc")
        with patch("sys.stdout") as out, patch("sys.stderr"):
            code = main(["generate", "A sunset", "--json"])
        self.assertEqual(code, 0)
        written = "".join(c[0][0] for c in out.write.call_args_list)
        data = json.loads(written.strip())
        self.assertEqual(data["video"], "v.mp4")
        self.assertEqual(data["explorer"], "https://basescan.org/tx/0xabc")

    def test_generate_agent_id_from_env(self):
        self.config.agent_id = "1:22831"
        self.client.run.return_value = GenerationResult(task_id="t", video="v", share_url="s")
        with patch("sys.stdout"):
            main(["generate", "x", "--model", "fal-kling-o3", "--duration", "10"])
        request = self.client.run.call_args[0][0]
        self.assertEqual(request.agent_id, "1:22831")
        self.assertEqual(request.model, "fal-kling-o3")

    def test_generate_timeout_exits_1(self):
        self.client.run.side_effect = PollingTimeout("task-1", 120, "10 minutes")
        with patch("sys.stdout"), patch("sys.stderr") as err:
            code = main(["generate", "x"])
        self.assertEqual(code, 1)
        written = "".join(c[0][0] for c in err.write.call_args_list)
        self.assertIn("Timed out after 10 minutes", written)

    def test_generate_remote_failure_exits_1(self):
        self.client.run.side_effect = RemoteJobFailure("task-1", "NSFW content", 30)
        with patch("sys.stdout"), patch("sys.stderr") as err:
            self.assertEqual(main(["generate", "x"]), 1)
        written = "".join(c[0][0] for c in err.write.call_args_list)
        self.assertIn("NSFW content", written)

    def test_generate_submission_failure_exits_1(self):
        self.client.run.side_effect = SubmissionError("Generation failed (HTTP 202)", 202, "{}")
        with patch("sys.stdout"), patch("sys.stderr"):
            self.assertEqual(main(["generate", "x"]), 1)

    def test_missing_credentials_fail_before_network(self):
        self.config.evm_private_key = None
        with patch("sys.stdout"), patch("sys.stderr"):
            self.assertEqual(main(["generate", "x"]), 1)
        self.mock_resolve.assert_not_called()
        self.client.run.assert_not_called()


    def test_bad_environment_exits_1(self):
        self.mock_from_env.side_effect = InputError("CLAWDVINE_TIMEOUT must be a whole number of seconds, got 'soon'")
        with patch("sys.stdout"), patch("sys.stderr") as err:
            self.assertEqual(main(["generate", "x"]), 1)
        self.assertIn("CLAWDVINE_TIMEOUT", "".join(c[0][0] for c in err.write.call_args_list))
        self.mock_resolve.assert_not_called()

    def test_share_base_passed_to_client(self):
        self.config.share_base = "https://staging.clawdvine.sh/media"
        self.client.run.return_value = GenerationResult(task_id="t", video="v", share_url="s")
        with patch("sys.stdout"):
            main(["generate", "x"])
        self.assertEqual(self.mock_client_cls.call_args[1]["share_base"], "https://staging.clawdvine.sh/media")

    def test_missing_prompt_exits_1(self):
        with patch("sys.stdout"), patch("sys.stderr"):
            self.assertEqual(main(["generate"]), 1)

    def test_bad_duration_exits_1(self):
        with patch("sys.stdout"), patch("sys.stderr"):
            self.assertEqual(main(["generate", "x", "--duration", "0"]), 1)
        self.client.run.assert_not_called()

    @patch("clawdvine_sdk.__main__.check_balance")
    def test_balance_uses_key_address(self, mock_check):
        mock_check.return_value = {"eligible": True, "balance": "11,000,000"}
        with patch("sys.stdout"):
            self.assertEqual(main(["balance"]), 0)
        self.assertEqual(mock_check.call_args[0][0], TEST_ADDRESS)

    @patch("clawdvine_sdk.__main__.check_balance")
    def test_balance_not_eligible_exits_1(self, mock_check):
        mock_check.return_value = {"eligible": False, "balance": "5"}
        with patch("sys.stdout"), patch("sys.stderr"):
            self.assertEqual(main(["balance", TEST_ADDRESS]), 1)

    def test_siwe_requires_key(self):
        self.config.evm_private_key = None
        with patch("sys.stdout"), patch("sys.stderr"):
            self.assertEqual(main(["siwe"]), 1)

    def test_siwe_prints_headers(self):
        with patch("sys.stdout") as out:
            self.assertEqual(main(["siwe"]), 0)
        written = "".join(c[0][0] for c in out.write.call_args_list)
        self.assertEqual(json.loads(written)["X-EVM-ADDRESS"], TEST_ADDRESS)

    @patch("clawdvine_sdk.__main__.generate_image")
    def test_image(self, mock_generate):
        mock_generate.return_value = {"result": {"content": [{"type": "image", "url": "https://x/i.png"}]}}
        with patch("sys.stdout") as out:
            self.assertEqual(main(["image", "A cat surfing"]), 0)
        written = "".join(c[0][0] for c in out.write.call_args_list)
        self.assertIn("https://x/i.png", written)
        self.assertEqual(mock_generate.call_args[0][3], "1:22831")


if __name__ == '__main__':
    unittest.main()
