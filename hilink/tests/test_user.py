from __future__ import annotations

import base64
import hashlib

import pytest

from ..credentials import Credentials
from ..enums import LoginState, PasswordType
from ..exceptions import (
    AlreadyLoggedInError,
    AuthenticationError,
    CredentialAttemptsExhaustedError,
    GenericLoginError,
    HilinkException,
    NotSupportedError,
    PasswordMustBeChangedError,
    PasswordWrongError,
    ResponseError,
    UsernameOrPasswordWrongError,
    UsernameWrongError,
    _ConnectionError,
)
from ..user import LoginStatus, User
from .conftest import TOKEN, FakeConnection, login_state


def _sha256_b64(payload: str) -> str:
    digest = hashlib.sha256(payload.encode()).hexdigest()
    return base64.b64encode(digest.encode()).decode()


async def test_login_state_not_supported(sleep_mock):
    conn = FakeConnection(
        {"user/state-login": NotSupportedError("100002", error_code=100002)}
    )
    user = User(conn, Credentials("admin", "secret"))

    assert await user.login() is True
    assert len(conn.calls["user/state-login"]) == 1
    assert "user/login" not in conn.calls
    sleep_mock.assert_not_called()


async def test_already_logged_in(credentials):
    conn = FakeConnection({"user/state-login": login_state(LoginState.LOGGED_IN)})
    user = User(conn, credentials)

    assert await user.login() is True
    assert "user/login" not in conn.calls


async def test_already_logged_in_force_new_login(credentials):
    conn = FakeConnection(
        {"user/state-login": login_state(LoginState.LOGGED_IN, PasswordType.BASE_64)}
    )
    user = User(conn, credentials)

    assert await user.login(force_new_login=True) is True
    assert conn.calls["user/login"] == [
        {
            "Username": "admin",
            "Password": base64.b64encode(b"secret").decode(),
            "password_type": "0",
        }
    ]
    assert conn.login_flags == [True]


async def test_login_sha256(credentials):
    conn = FakeConnection(
        {"user/state-login": login_state(LoginState.LOGGED_OUT, PasswordType.SHA256)}
    )
    user = User(conn, credentials)

    assert await user.login() is True

    expected = _sha256_b64("admin" + _sha256_b64("secret") + TOKEN)
    assert conn.calls["user/login"] == [
        {"Username": "admin", "Password": expected, "password_type": "4"}
    ]


async def test_login_without_password():
    conn = FakeConnection(
        {"user/state-login": login_state(LoginState.LOGGED_OUT, PasswordType.SHA256)}
    )
    user = User(conn, Credentials("admin", None))

    assert await user.login() is True
    assert conn.calls["user/login"][0]["Password"] == ""


async def test_login_not_acknowledged(credentials):
    conn = FakeConnection(
        {
            "user/state-login": login_state(LoginState.LOGGED_OUT),
            "user/login": "NOK",
        }
    )
    user = User(conn, credentials)

    assert await user.login() is False


async def test_state_probe_retries(sleep_mock, credentials):
    conn = FakeConnection(
        {
            "user/state-login": [
                _ConnectionError("Remote end closed connection"),
                _ConnectionError("Remote end closed connection"),
                _ConnectionError("Remote end closed connection"),
                _ConnectionError("Remote end closed connection"),
                login_state(LoginState.LOGGED_OUT, PasswordType.BASE_64),
            ]
        }
    )
    user = User(conn, credentials)

    assert await user.login() is True
    assert len(conn.calls["user/state-login"]) == 5
    assert [call.args[0] for call in sleep_mock.call_args_list] == [
        0.1,
        0.2,
        0.3,
        0.4,
    ]
    assert sum(call.args[0] for call in sleep_mock.call_args_list) == pytest.approx(1.0)
    assert conn.calls["user/login"][0]["password_type"] == "0"


async def test_state_probe_gives_up(sleep_mock, credentials):
    errors = [_ConnectionError(f"attempt {i}") for i in range(1, 6)]
    conn = FakeConnection({"user/state-login": list(errors)})
    user = User(conn, credentials)

    with pytest.raises(_ConnectionError) as exc_info:
        await user.login()

    assert exc_info.value is errors[-1]
    assert len(conn.calls["user/state-login"]) == 5
    assert sleep_mock.call_count == 4
    assert "user/login" not in conn.calls


async def test_state_probe_not_supported_after_retry(sleep_mock, credentials):
    conn = FakeConnection(
        {
            "user/state-login": [
                _ConnectionError("Remote end closed connection"),
                NotSupportedError("100002", error_code=100002),
            ]
        }
    )
    user = User(conn, credentials)

    assert await user.probe_state() is None
    assert len(conn.calls["user/state-login"]) == 2
    assert sleep_mock.call_count == 1


async def test_probe_state(credentials):
    conn = FakeConnection({"user/state-login": login_state(-1, 4)})
    user = User(conn, credentials)

    assert await user.probe_state() == LoginStatus(
        state=LoginState.LOGGED_OUT, password_type=PasswordType.SHA256
    )


async def test_password_type_probed_every_login(credentials):
    conn = FakeConnection(
        {
            "user/state-login": [
                login_state(LoginState.LOGGED_OUT, PasswordType.BASE_64),
                login_state(LoginState.LOGGED_OUT, PasswordType.SHA256),
            ]
        }
    )
    user = User(conn, credentials)

    await user.login()
    await user.login()

    assert [call["password_type"] for call in conn.calls["user/login"]] == ["0", "4"]


@pytest.mark.parametrize(
    ("error_code", "expectation", "message"),
    [
        (108001, pytest.raises(UsernameWrongError), "108001: Username wrong"),
        (108002, pytest.raises(PasswordWrongError), "108002: Password wrong"),
        (108003, pytest.raises(AlreadyLoggedInError), "108003: Already login"),
        (
            108006,
            pytest.raises(UsernameOrPasswordWrongError),
            "108006: Username and Password wrong",
        ),
        (
            108007,
            pytest.raises(CredentialAttemptsExhaustedError),
            "108007: Password overrun",
        ),
        (115002, pytest.raises(PasswordMustBeChangedError), "115002: Password modify"),
        (99, pytest.raises(GenericLoginError), "99: Unknown"),
    ],
    ids=(
        "USERNAME_WRONG",
        "PASSWORD_WRONG",
        "ALREADY_LOGIN",
        "USERNAME_PWD_WRONG",
        "USERNAME_PWD_OVERRUN",
        "USERNAME_PWD_MODIFY",
        "unknown",
    ),
)
async def test_login_errors(credentials, error_code, expectation, message):
    response_error = ResponseError(str(error_code), error_code=error_code)
    conn = FakeConnection(
        {
            "user/state-login": login_state(LoginState.LOGGED_OUT),
            "user/login": response_error,
        }
    )
    user = User(conn, credentials)

    with expectation as exc_info:
        await user.login()

    assert isinstance(exc_info.value, AuthenticationError)
    assert exc_info.value.error_code == error_code
    assert exc_info.value.message == message
    assert str(exc_info.value) == message
    assert exc_info.value.__cause__ is response_error


@pytest.mark.parametrize(
    ("error", "expectation"),
    [
        (_ConnectionError("reset"), pytest.raises(_ConnectionError)),
        (ResponseError("no code"), pytest.raises(ResponseError)),
        (ValueError("boom"), pytest.raises(ValueError)),
    ],
    ids=("connection", "response-without-code", "other"),
)
async def test_login_other_errors_pass_through(credentials, error, expectation):
    conn = FakeConnection(
        {
            "user/state-login": login_state(LoginState.LOGGED_OUT),
            "user/login": error,
        }
    )
    user = User(conn, credentials)

    with expectation as exc_info:
        await user.login()

    assert exc_info.value is error


async def test_login_sha256_requires_token(credentials):
    conn = FakeConnection(
        {"user/state-login": login_state(LoginState.LOGGED_OUT, PasswordType.SHA256)},
        verification_token=None,
    )
    user = User(conn, credentials)

    with pytest.raises(HilinkException, match="verification token is required"):
        await user.login()
    assert "user/login" not in conn.calls


async def test_logout(credentials):
    conn = FakeConnection({"user/logout": "OK"})
    user = User(conn, credentials)

    assert await user.logout() == "OK"
    assert conn.calls["user/logout"] == [{"Logout": 1}]


async def test_set_remind(credentials):
    conn = FakeConnection({"user/remind": "OK"})
    user = User(conn, credentials)

    assert await user.set_remind("1") == "OK"
    assert conn.calls["user/remind"] == [{"remindstate": "1"}]


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("state_login", "user/state-login"),
        ("remind", "user/remind"),
        ("password", "user/password"),
        ("pwd", "user/pwd"),
        ("authentication_login", "user/authentication_login"),
        ("challenge_login", "user/challenge_login"),
        ("hilink_login", "user/hilink_login"),
        ("history_login", "user/history-login"),
        ("heartbeat", "user/heartbeat"),
        ("web_feature_switch", "user/web-feature-switch"),
        ("input_event", "user/input_event"),
        ("screen_state", "user/screen_state"),
        ("session", "user/session"),
    ],
)
async def test_passthrough_getters(credentials, method, path):
    conn = FakeConnection({path: {"value": "1"}})
    user = User(conn, credentials)

    assert await getattr(user, method)() == {"value": "1"}
    assert len(conn.calls[path]) == 1


async def test_empty_login_state(credentials):
    conn = FakeConnection({"user/state-login": {}})
    user = User(conn, credentials)

    assert await user.login() is True
    assert conn.calls["user/login"] == [
        {
            "Username": "admin",
            "Password": base64.b64encode(b"secret").decode(),
            "password_type": "0",
        }
    ]


@pytest.mark.parametrize(
    "response",
    [
        {"State": "x", "password_type": "4"},
        {"State": "-1", "password_type": "sha"},
    ],
    ids=("state", "password_type"),
)
async def test_login_state_unparsable(credentials, response):
    conn = FakeConnection({"user/state-login": response})
    user = User(conn, credentials)

    status = await user.probe_state()
    assert status.state == LoginState.LOGGED_OUT

    assert await user.login() is True
    assert len(conn.calls["user/login"]) == 1


async def test_login_state_without_state_field(credentials):
    conn = FakeConnection({"user/state-login": {"password_type": "4"}})
    user = User(conn, credentials)

    assert await user.probe_state() == LoginStatus(
        state=LoginState.LOGGED_OUT, password_type=PasswordType.SHA256
    )


def test_login_status_from_integer_values():
    assert LoginStatus.from_response({"State": 0, "password_type": 0}) == LoginStatus(
        state=LoginState.LOGGED_IN, password_type=PasswordType.BASE_64
    )
