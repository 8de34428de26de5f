import pytest

from payhub_backend.core.exceptions import (
    ConflictError,
    NotAcceptableError,
    ResourceNotFoundError,
)
from payhub_backend.modules.dwolla.errors import DwollaFieldError, DwollaRequestError
from payhub_backend.modules.dwolla.schemas import DwollaBeneficialOwner, DwollaCustomer
from payhub_backend.modules.tenants import services
from payhub_backend.modules.tenants.schemas import (
    BeneficialOwnerCreate,
    CompanyCreate,
    CompanyRetry,
    CompanyUpdate,
)

from .helpers import (
    auth_headers,
    company_payload,
    customer_uri,
    make_company,
    make_owner,
)


def _owner_data() -> BeneficialOwnerCreate:
    return BeneficialOwnerCreate(
        first_name="Alan",
        last_name="Turing",
        date_of_birth="1970-06-23",
        ssn="123456789",
        address={
            "address1": "3 Park Ave",
            "city": "London",
            "state_province_region": "LDN",
            "country": "GB",
        },
    )


# =============================================================================
# COMPANY
# =============================================================================


async def test_create_company_registers_business_customer(db, tenant, dwolla):
    location = customer_uri("new-company")
    dwolla.create_customer.return_value = location
    dwolla.get_customer.return_value = DwollaCustomer(
        status="unverified", type="business"
    )

    company = await services.create_company(
        db, dwolla, tenant.id, CompanyCreate(**company_payload())
    )

    assert company.tenant_id == tenant.id
    assert company.dwolla_uri == location
    assert company.dwolla_status == "unverified"
    assert company.controller_title == "CEO"

    payload = dwolla.create_customer.await_args.args[0]
    assert payload["type"] == "business"
    assert payload["controller"]["ssn"] == "6789"
    assert "ssn" not in payload


async def test_sole_proprietor_verifies_without_controller(db, tenant, dwolla):
    dwolla.create_customer.return_value = customer_uri("sole")
    dwolla.get_customer.return_value = DwollaCustomer(status="verified")
    data = company_payload(business_type="soleProprietorship")
    del data["controller"]

    company = await services.create_company(
        db, dwolla, tenant.id, CompanyCreate(**data)
    )

    assert company.controller_first_name is None
    assert company.controller_title is None
    payload = dwolla.create_customer.await_args.args[0]
    assert "controller" not in payload
    assert payload["ssn"] == "1234"
    assert payload["dateOfBirth"] == "1980-01-01"


async def test_create_company_twice_conflicts(db, tenant, dwolla):
    await make_company(db, tenant.id)

    with pytest.raises(ConflictError):
        await services.create_company(
            db, dwolla, tenant.id, CompanyCreate(**company_payload())
        )
    dwolla.create_customer.assert_not_awaited()


async def test_get_company_before_submission_is_not_found(db, tenant):
    with pytest.raises(ResourceNotFoundError):
        await services.get_company(db, tenant.id)


@pytest.mark.parametrize("status", ["verified", "unverified", "suspended"])
async def test_retry_rejected_outside_retry_statuses(db, tenant, dwolla, status):
    await make_company(db, tenant.id, status=status)

    with pytest.raises(NotAcceptableError):
        await services.retry_company(
            db, dwolla, tenant.id, CompanyRetry(**company_payload())
        )
    dwolla.update_customer.assert_not_awaited()


@pytest.mark.parametrize("status", ["retry", "document"])
async def test_retry_resubmits_full_payload(db, tenant, dwolla, status):
    company = await make_company(db, tenant.id, status=status)
    dwolla.update_customer.return_value = DwollaCustomer(
        status="unverified", type="business"
    )

    retried = await services.retry_company(
        db, dwolla, tenant.id, CompanyRetry(**company_payload(first_name="Augusta"))
    )

    assert retried.dwolla_status == "unverified"
    assert retried.first_name == "Augusta"
    location, payload = dwolla.update_customer.await_args.args
    assert location == company.dwolla_uri
    assert payload["firstName"] == "Augusta"


async def test_update_verified_company_pushes_contact_fields(db, tenant, dwolla):
    company = await make_company(db, tenant.id, status="verified")
    dwolla.update_customer.return_value = DwollaCustomer(status="verified")

    updated = await services.update_company(
        db, dwolla, tenant.id, CompanyUpdate(email="billing@acme.example")
    )

    assert updated.email == "billing@acme.example"
    payload = dwolla.update_customer.await_args.args[1]
    assert payload["email"] == "billing@acme.example"
    assert "firstName" not in payload
    assert company.first_name == "Ada"


async def test_update_verified_company_ignores_identity_change(db, tenant, dwolla):
    await make_company(db, tenant.id, status="verified")
    dwolla.update_customer.return_value = DwollaCustomer(status="verified")

    updated = await services.update_company(
        db, dwolla, tenant.id, CompanyUpdate(first_name="Augusta", phone="5550199")
    )

    assert updated.first_name == "Ada"
    assert updated.phone == "5550199"
    payload = dwolla.update_customer.await_args.args[1]
    assert payload["phone"] == "5550199"
    assert "firstName" not in payload


async def test_update_blocked_while_documents_requested(db, tenant, dwolla):
    await make_company(db, tenant.id, status="document")

    with pytest.raises(NotAcceptableError):
        await services.update_company(
            db, dwolla, tenant.id, CompanyUpdate(email="billing@acme.example")
        )


# =============================================================================
# BENEFICIAL OWNERS
# =============================================================================


async def test_add_owner_stores_verification_status(db, tenant, dwolla):
    company = await make_company(db, tenant.id, status="document")
    location = "https://api-sandbox.dwolla.com/beneficial-owners/new"
    dwolla.create_beneficial_owner.return_value = location
    dwolla.get_beneficial_owner.return_value = DwollaBeneficialOwner(
        verificationStatus="verified"
    )

    owner = await services.add_owner(db, dwolla, tenant.id, _owner_data())

    assert owner.company_id == company.id
    assert owner.dwolla_uri == location
    assert owner.verification_status == "verified"


async def test_owner_changes_blocked_once_company_verified(db, tenant, dwolla):
    company = await make_company(db, tenant.id, status="verified")
    owner = await make_owner(db, tenant.id, company.id)

    with pytest.raises(NotAcceptableError):
        await services.add_owner(db, dwolla, tenant.id, _owner_data())
    with pytest.raises(NotAcceptableError):
        await services.delete_owner(db, dwolla, tenant.id, owner.id)
    with pytest.raises(NotAcceptableError):
        await services.certify_ownership(db, dwolla, tenant.id)

    dwolla.create_beneficial_owner.assert_not_awaited()
    dwolla.delete_beneficial_owner.assert_not_awaited()


async def test_deleted_owner_is_no_longer_listed(db, tenant, dwolla):
    company = await make_company(db, tenant.id, status="unverified")
    owner = await make_owner(db, tenant.id, company.id)

    await services.delete_owner(db, dwolla, tenant.id, owner.id)

    dwolla.delete_beneficial_owner.assert_awaited_once_with(owner.dwolla_uri)
    with pytest.raises(ResourceNotFoundError):
        await services.get_owner(db, tenant.id, owner.id)


async def test_certify_returns_processor_status(db, tenant, dwolla):
    await make_company(db, tenant.id, status="document")
    dwolla.certify_beneficial_ownership.return_value = "certified"

    assert await services.certify_ownership(db, dwolla, tenant.id) == "certified"


# =============================================================================
# ROUTES
# =============================================================================


async def test_processor_rejection_is_returned_as_validation_failure(
    api, tenant, dwolla
):
    dwolla.create_customer.side_effect = DwollaRequestError(
        status_code=400,
        code="ValidationError",
        message="Validation error(s) present.",
        errors=[
            DwollaFieldError(
                path="/controller/ssn", code="Invalid", message="Invalid parameter."
            )
        ],
    )

    response = await api.post(
        "/api/tenant/company",
        json=company_payload(),
        headers=auth_headers(tenant.id),
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["category"] == "validation_failure"
    assert "controller.ssn" in body["message"]
    assert body["error"]["details"]["processor_code"] == "ValidationError"
    assert body["error"]["details"]["errors"][0]["path"] == "/controller/ssn"


async def test_placeholder_ssn_rejected_before_reaching_processor(
    api, tenant, dwolla
):
    response = await api.post(
        "/api/tenant/company",
        json=company_payload(ssn="0000"),
        headers=auth_headers(tenant.id),
    )

    assert response.status_code == 422
    dwolla.create_customer.assert_not_awaited()


async def test_get_company_returns_envelope(api, db, tenant):
    await make_company(db, tenant.id)

    response = await api.get("/api/tenant/company", headers=auth_headers(tenant.id))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["business_name"] == "Acme Staffing LLC"
    assert body["data"]["dwolla_status"] == "verified"


async def test_controller_is_readable(api, db, tenant):
    await make_company(
        db,
        tenant.id,
        controller_first_name="Grace",
        controller_last_name="Hopper",
        controller_title="CEO",
    )

    response = await api.get(
        "/api/tenant/company/controller", headers=auth_headers(tenant.id)
    )

    assert response.json()["data"] == {
        "first_name": "Grace",
        "last_name": "Hopper",
        "title": "CEO",
    }


async def test_retry_from_verified_returns_not_acceptable(api, db, tenant):
    await make_company(db, tenant.id, status="verified")

    response = await api.put(
        "/api/tenant/company",
        json=company_payload(),
        headers=auth_headers(tenant.id),
    )

    assert response.status_code == 406
    assert response.json()["error"]["category"] == "not_acceptable"
