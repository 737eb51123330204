from click.testing import CliRunner

from inverse_arena.main import cli


def test_help_lists_commands():
    result = CliRunner().invoke(cli, ["--help"])

    assert result.exit_code == 0
    for command in ["arenas", "stats", "profile", "creator", "watch", "create", "join", "choose", "claim",
                    "refund", "stake", "unstake"]:
        assert command in result.output


def test_stake_below_minimum_is_rejected_before_connecting():
    result = CliRunner().invoke(cli, ["stake", "1"])

    assert result.exit_code == 2
    assert "Minimum stake is 4 USDC" in result.output


def test_choose_rejects_unknown_choice():
    result = CliRunner().invoke(cli, ["choose", "3", "Edge"])

    assert result.exit_code == 2


class _RecordingActions:
    def __init__(self):
        self.deposits = []

    def deposit_creator_stake(self, amount, on_state=None):
        self.deposits.append(amount)


class _OfflineClient:
    def __init__(self):
        self.actions = _RecordingActions()


def test_stake_amount_is_truncated_to_cents(monkeypatch):
    client = _OfflineClient()
    monkeypatch.setattr("inverse_arena.main._run", lambda coro_factory: coro_factory(client))

    result = CliRunner().invoke(cli, ["stake", "4.129"])

    assert result.exit_code == 0
    assert client.actions.deposits == [4.12]


def test_interrupted_write_exits_quietly(monkeypatch):
    def _interrupted(coro):
        coro.close()
        raise KeyboardInterrupt

    monkeypatch.setenv("ARENA_RPC_URL", "http://localhost:8545")
    monkeypatch.setenv("ARENA_MANAGER_ADDRESS", "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa")
    monkeypatch.setattr("inverse_arena.main.asyncio.run", _interrupted)

    result = CliRunner().invoke(cli, ["join", "3"])

    assert result.exit_code == 0
    assert result.exception is None
    assert "Interrupted" in result.output
