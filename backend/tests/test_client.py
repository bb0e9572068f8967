import pytest
import requests

from portal.client import PortalClient, PortalAPIError


class UnreachableSession:
    def request(self, method, url, **kwargs):
        raise requests.ConnectionError(f"cannot reach {url}")


@pytest.fixture()
def portal(client):
    return PortalClient(base_url="http://testserver", session=client)


def test_signup_stores_token_for_later_calls(portal):
    result = portal.signup("ops@acme.test", "secret1", "admin")

    assert result["success"] is True
    assert result["data"]["user"]["email"] == "ops@acme.test"
    assert portal.token == result["data"]["token"]
    assert portal.fetch_profiles() == []


def test_login_failure_is_reported_not_raised(portal):
    portal.signup("ops@acme.test", "secret1", "admin")

    result = portal.login("ops@acme.test", "wrong", "admin")
    assert result == {"success": False, "error": "Invalid credentials or role mismatch."}


def test_list_reads_are_best_effort(portal):
    # no token: the server answers 401
    assert portal.fetch_renewals() == []
    assert portal.fetch_projects() == []


def test_network_errors_yield_empty_lists():
    offline = PortalClient(base_url="http://offline.invalid", session=UnreachableSession())

    assert offline.fetch_deliverables() == []
    assert offline.login("a@b.com", "secret1", "admin") == {
        "success": False,
        "error": "Network error or server unreachable",
    }


def test_write_errors_raise_with_server_message(portal):
    portal.signup("ops@acme.test", "secret1", "admin")

    with pytest.raises(PortalAPIError) as excinfo:
        portal.delete_project(12345)
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Project not found or already inactive."


def test_employee_lifecycle_through_client(portal):
    portal.signup("ops@acme.test", "secret1", "admin")

    created = portal.add_employee(
        {"name": "Jane Doe", "email": "jane@acme.test", "company": "Acme", "total_spent": None},
        [{"name_project": "Website", "milestones": [{"milestone_name": "Design"}]}],
        image=("logo.png", b"png-bytes", "image/png"),
    )
    employee_id = created["employeeData"]["id"]
    assert created["employeeData"]["image"].startswith("http://testserver/uploads/image-")

    updated = portal.update_profile(employee_id, {"status": "suspended"})
    assert updated["data"]["status"] == "suspended"

    project_id = created["projectData"][0]["id"]
    details = portal.get_project_details(project_id)
    assert details["milestones"][0]["milestone_name"] == "Design"

    portal.delete_employee(employee_id)
    assert portal.fetch_profiles() == []
    assert portal.get_profile(employee_id)["active"] is False


def test_renewal_lifecycle_through_client(portal):
    portal.signup("ops@acme.test", "secret1", "admin")

    created = portal.add_renewal({
        "service": "Domain",
        "provider": "Namecheap",
        "domain": "acme.test",
        "purchaseDate": "2024-03-01",
        "renewalDate": "2025-03-01",
        "cost": 12,
    })
    assert [r["id"] for r in portal.fetch_renewals()] == [created["id"]]

    assert portal.delete_renewal(created["id"]) is None
    assert portal.fetch_renewals() == []


def test_deliverable_view_without_id_is_empty(portal):
    assert portal.fetch_deliverable_view(None) == []


class HtmlSession:
    def request(self, method, url, **kwargs):
        response = requests.Response()
        response.status_code = 200
        response._content = b"<html>maintenance</html>"
        return response


def test_non_json_list_response_yields_empty_list():
    portal = PortalClient(base_url="http://proxy.invalid", session=HtmlSession())
    assert portal.fetch_profiles() == []
