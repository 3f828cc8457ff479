"""
Tests for the httpsig-cli command-line interface
"""

import json

import pytest

from httpsig_sdk.cli import create_parser, main

from conftest import EMPTY_SHA256_DIGEST, RSA_KEY_PASSPHRASE


class TestSignCommand:
    """Test the sign subcommand"""

    def test_golden_request(self, rsa_key_path, golden_signature, capsys):
        exit_code = main([
            "sign", "http://petstore.swagger.io/v2/pet/1",
            "--key-id", "test-key",
            "--key-file", str(rsa_key_path),
            "--signed-headers", "(request-target) (created) digest",
            "--created", "1610000000",
            "--show-canonical",
        ])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["headers"]["Digest"] == EMPTY_SHA256_DIGEST
        assert output["headers"]["Authorization"].endswith(f'signature="{golden_signature}"')
        assert output["canonical_string"].startswith("(request-target): get /v2/pet/1\n")

    def test_passphrase_from_environment(self, rsa_encrypted_key_path, monkeypatch, capsys):
        monkeypatch.setenv("HTTPSIG_KEY_PASSPHRASE", RSA_KEY_PASSPHRASE)
        exit_code = main([
            "sign", "http://example.com/",
            "--key-id", "k",
            "--key-file", str(rsa_encrypted_key_path),
        ])
        assert exit_code == 0
        assert "Authorization" in json.loads(capsys.readouterr().out)["headers"]

    def test_config_file(self, rsa_key_path, tmp_path, capsys, monkeypatch):
        for name in ("HTTPSIG_KEY_ID", "HTTPSIG_KEY_FILE", "HTTPSIG_KEY_PASSPHRASE"):
            monkeypatch.delenv(name, raising=False)
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({
            "signing": {"key_id": "from-config", "key_file": str(rsa_key_path), "profile": "standard"}
        }))

        exit_code = main(["sign", "http://example.com/pets", "-X", "POST", "-d", "{}", "--config", str(config_path)])

        assert exit_code == 0
        headers = json.loads(capsys.readouterr().out)["headers"]
        assert headers["Authorization"].startswith('Signature keyId="from-config"')

    def test_missing_signed_header(self, rsa_key_path, capsys):
        exit_code = main([
            "sign", "http://example.com/",
            "--key-id", "k",
            "--key-file", str(rsa_key_path),
            "--signed-headers", "x-missing",
        ])
        assert exit_code == 1
        assert "does not contain the x-missing header" in capsys.readouterr().err

    def test_requires_key_arguments(self, capsys):
        assert main(["sign", "http://example.com/"]) == 1
        assert "--key-id" in capsys.readouterr().err

    def test_invalid_header_argument(self, rsa_key_path, capsys):
        exit_code = main([
            "sign", "http://example.com/",
            "--key-id", "k",
            "--key-file", str(rsa_key_path),
            "-H", "no-colon-here",
        ])
        assert exit_code == 1


class TestInspectKeyCommand:
    """Test the inspect-key subcommand"""

    def test_rsa_key(self, rsa_key_path, capsys):
        assert main(["inspect-key", "--key-file", str(rsa_key_path)]) == 0
        info = json.loads(capsys.readouterr().out)
        assert info["type"] == "RSA"
        assert info["armor"] == "RSA"
        assert info["key_size"] == 2048

    def test_ec_key(self, ec_key_path, capsys):
        assert main(["inspect-key", "--key-file", str(ec_key_path)]) == 0
        info = json.loads(capsys.readouterr().out)
        assert info["type"] == "EC"
        assert info["curve"] == "secp256r1"

    def test_encrypted_key_without_passphrase(self, rsa_encrypted_key_path, capsys, monkeypatch):
        monkeypatch.delenv("HTTPSIG_KEY_PASSPHRASE", raising=False)
        assert main(["inspect-key", "--key-file", str(rsa_encrypted_key_path)]) == 1
        assert "passphrase" in capsys.readouterr().err

    def test_missing_key_file_argument(self, capsys):
        assert main(["inspect-key"]) == 1


class TestParser:
    """Test argument parsing"""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_unknown_algorithm_rejected_by_parser(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["sign", "http://example.com/", "--hash", "MD5"])
