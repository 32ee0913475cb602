"""Unit tests for service use cases"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from pydantic import ValidationError
from src.app.use_cases.services import (
    CreateService,
    UpdateService,
    DeleteService,
    SendServicesToBilling,
    CreateServiceCommandDTO,
    UpdateServiceCommandDTO,
    SendToBillingCommandDTO,
)
from src.domain.billing_pending import BillingPending, PendingStatus
from src.domain.service import Service, ServiceStatus


def make_service(service_id, status=ServiceStatus.CREATED, amount="100.00"):
    return Service(
        id=service_id,
        service_date=date(2024, 1, 15),
        customer_id=1,
        amount=Decimal(amount),
        status=status,
    )


def assign_service_id(service):
    service.id = 1
    return service


def assign_pending_id(pending):
    pending.id = 100 + pending.service_id
    return pending


@pytest.fixture
def mock_service_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=assign_service_id)
    repo.get_by_id = AsyncMock()
    repo.get_by_ids = AsyncMock(return_value=[])
    repo.update = AsyncMock(side_effect=lambda s: s)
    repo.delete = AsyncMock()
    return repo


@pytest.fixture
def mock_pending_repo():
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=assign_pending_id)
    repo.get_by_service_id = AsyncMock(return_value=None)
    return repo


class TestCreateServiceCommand:

    def test_rejects_non_positive_amount(self):
        with pytest.raises(ValidationError):
            CreateServiceCommandDTO(service_date=date(2024, 1, 15), customer_id=1, amount=Decimal("0"))

    def test_rejects_more_than_two_decimals(self):
        with pytest.raises(ValidationError):
            CreateServiceCommandDTO(service_date=date(2024, 1, 15), customer_id=1, amount=Decimal("1.005"))

    def test_rejects_non_positive_customer(self):
        with pytest.raises(ValidationError):
            CreateServiceCommandDTO(service_date=date(2024, 1, 15), customer_id=0, amount=Decimal("1.00"))


@pytest.mark.asyncio
class TestCreateService:

    async def test_new_service_is_created(self, mock_uow, mock_service_repo):
        command = CreateServiceCommandDTO(
            service_date=date(2024, 1, 15), customer_id=1, amount=Decimal("1500.50")
        )

        result = await CreateService(mock_uow, mock_service_repo).execute(command)

        assert result.is_ok()
        assert result.value.id == 1
        assert result.value.status == "CREATED"
        assert result.value.amount == Decimal("1500.50")
        mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
class TestUpdateService:

    async def test_only_given_fields_change(self, mock_uow, mock_service_repo):
        service = make_service(1)
        mock_service_repo.get_by_id.return_value = service

        result = await UpdateService(mock_uow, mock_service_repo).execute(
            1, UpdateServiceCommandDTO(amount=Decimal("250.00"))
        )

        assert result.is_ok()
        assert result.value.amount == Decimal("250.00")
        assert result.value.customer_id == 1
        assert result.value.service_date == date(2024, 1, 15)

    async def test_sent_service_cannot_be_updated(self, mock_uow, mock_service_repo):
        """
        Given: A service already SENT_TO_BILL
        When: Updating it
        Then: BUSINESS_RULE_VIOLATION is returned and nothing is written
        """
        mock_service_repo.get_by_id.return_value = make_service(1, status=ServiceStatus.SENT_TO_BILL)

        result = await UpdateService(mock_uow, mock_service_repo).execute(
            1, UpdateServiceCommandDTO(amount=Decimal("250.00"))
        )

        assert result.is_err()
        assert result.error.code == "BUSINESS_RULE_VIOLATION"
        assert "Only services with status 'CREATED' can be updated" in result.error.message
        mock_service_repo.update.assert_not_called()

    async def test_unknown_service(self, mock_uow, mock_service_repo):
        mock_service_repo.get_by_id.return_value = None

        result = await UpdateService(mock_uow, mock_service_repo).execute(9, UpdateServiceCommandDTO())

        assert result.error.code == "SERVICE_NOT_FOUND"


@pytest.mark.asyncio
class TestDeleteService:

    async def test_created_service_is_deleted(self, mock_uow, mock_service_repo):
        service = make_service(1)
        mock_service_repo.get_by_id.return_value = service

        result = await DeleteService(mock_uow, mock_service_repo).execute(1)

        assert result.is_ok()
        mock_service_repo.delete.assert_called_once_with(service)
        mock_uow.commit.assert_called_once()

    async def test_invoiced_service_cannot_be_deleted(self, mock_uow, mock_service_repo):
        mock_service_repo.get_by_id.return_value = make_service(1, status=ServiceStatus.INVOICED)

        result = await DeleteService(mock_uow, mock_service_repo).execute(1)

        assert result.error.code == "BUSINESS_RULE_VIOLATION"
        assert "can be deleted" in result.error.message
        mock_service_repo.delete.assert_not_called()


@pytest.mark.asyncio
class TestSendServicesToBilling:

    async def test_mixed_request_reports_each_service(self, mock_uow, mock_service_repo, mock_pending_repo):
        """
        Given: Service 1 CREATED, service 2 SENT_TO_BILL, service 3 CREATED
        with an existing pending and no service 4
        When: Sending [1, 2, 3, 4]
        Then: Only service 1 succeeds and the others are reported with reasons
        """
        # Arrange
        service_1 = make_service(1)
        mock_service_repo.get_by_ids.return_value = [
            service_1,
            make_service(2, status=ServiceStatus.SENT_TO_BILL),
            make_service(3),
        ]

        async def existing_pending(service_id):
            if service_id == 3:
                return BillingPending(id=50, service_id=3)
            return None

        mock_pending_repo.get_by_service_id.side_effect = existing_pending
        use_case = SendServicesToBilling(mock_uow, mock_service_repo, mock_pending_repo)

        # Act
        result = await use_case.execute(SendToBillingCommandDTO(service_ids=[1, 2, 3, 4]))

        # Assert
        assert result.is_ok()
        assert result.value.success == [1]
        reasons = {entry.id: entry.reason for entry in result.value.failed}
        assert reasons[2] == (
            "Service is in status 'SENT_TO_BILL'. Only services with status 'CREATED' can be sent to billing."
        )
        assert reasons[3] == "Service already has a billing pending"
        assert reasons[4] == "Service not found"

        assert service_1.status == ServiceStatus.SENT_TO_BILL
        created = mock_pending_repo.create.call_args.args[0]
        assert created.service_id == 1
        assert created.status == PendingStatus.PENDING
        assert result.value.pendings[0].id == 101
        assert result.value.pendings[0].service.status == "SENT_TO_BILL"
        mock_uow.commit.assert_called_once()

    async def test_duplicate_ids_are_sent_once(self, mock_uow, mock_service_repo, mock_pending_repo):
        mock_service_repo.get_by_ids.return_value = [make_service(1)]
        use_case = SendServicesToBilling(mock_uow, mock_service_repo, mock_pending_repo)

        result = await use_case.execute(SendToBillingCommandDTO(service_ids=[1, 1]))

        assert result.value.success == [1]
        assert mock_pending_repo.create.call_count == 1

    async def test_persistence_error_rolls_back(self, mock_uow, mock_service_repo, mock_pending_repo):
        mock_service_repo.get_by_ids.return_value = [make_service(1)]
        mock_pending_repo.create.side_effect = RuntimeError("unique constraint")
        use_case = SendServicesToBilling(mock_uow, mock_service_repo, mock_pending_repo)

        result = await use_case.execute(SendToBillingCommandDTO(service_ids=[1]))

        assert result.error.code == "SEND_TO_BILLING_FAILED"
        mock_uow.rollback.assert_called_once()

    def test_empty_request_is_invalid(self):
        with pytest.raises(ValidationError):
            SendToBillingCommandDTO(service_ids=[])
