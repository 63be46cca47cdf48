import pytest

from appsnet.eligibility import (
    dns_name,
    get_dns_name,
    is_already_member,
    is_eligible_container,
    is_managed_project,
    is_prohibited_network_mode,
)
from appsnet.settings import NETWORK_NAME


@pytest.mark.parametrize(
    "mode",
    ["none", "host", "container:abc123", "container:", "service:db", "service:"],
)
def test_prohibited_network_modes(mode):
    assert is_prohibited_network_mode(mode) is True


@pytest.mark.parametrize(
    "mode",
    ["bridge", "default", "ix-myapp_default", "hostnet", "nonexistent", "my-container:1", "", "HOST"],
)
def test_allowed_network_modes(mode):
    assert is_prohibited_network_mode(mode) is False


@pytest.mark.parametrize("project", ["ix-myapp", "ix-", "ix-a-b-c"])
def test_managed_projects(project):
    assert is_managed_project(project) is True


@pytest.mark.parametrize("project", [None, "", "myapp", "IX-myapp", "x-ix-app", " ix-app"])
def test_unmanaged_projects(project):
    assert is_managed_project(project) is False


def test_eligibility_follows_project_label(make_container):
    assert is_eligible_container(make_container(project="ix-myapp"))
    assert not is_eligible_container(make_container(project="other"))
    assert not is_eligible_container(make_container(project=None))


def test_membership(make_container):
    assert is_already_member(make_container(networks=["bridge", NETWORK_NAME]))
    assert not is_already_member(make_container(networks=["bridge"]))
    assert not is_already_member(make_container(networks=[]))


def test_dns_name_is_deterministic(make_container):
    c = make_container(project="ix-myapp", service="web")
    assert get_dns_name(c) == "web.ix-myapp.svc.cluster.local"
    assert get_dns_name(c) == get_dns_name(make_container(container_id="other", project="ix-myapp", service="web"))
    assert dns_name("db", "ix-shop") == "db.ix-shop.svc.cluster.local"
