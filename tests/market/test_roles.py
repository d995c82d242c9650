import pytest

from market.roles import domain_for, resolve_role
from models.enums import Role


@pytest.mark.parametrize(
    "email, expected",
    [
        ("asha@gmail.com", Role.BUYER),
        ("farm@veggistore.com", Role.SELLER),
        ("ops@ranbidge.com", Role.ADMIN),
        ("someone@yahoo.com", Role.INVALID),
        ("gmail.com", Role.INVALID),
        ("ASHA@GMAIL.COM", Role.INVALID),
        ("", Role.INVALID),
        (None, Role.INVALID),
        (42, Role.INVALID),
    ],
)
def test_resolve_role(email, expected):
    assert resolve_role(email) is expected


def test_domain_for_each_role():
    assert domain_for(Role.BUYER) == "@gmail.com"
    assert domain_for(Role.SELLER) == "@veggistore.com"
    assert domain_for(Role.ADMIN) == "@ranbidge.com"
    assert domain_for(Role.INVALID) is None
