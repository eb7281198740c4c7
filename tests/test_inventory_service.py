"""Tests for the inventory service against the in-memory store."""

import pytest

from cellarbook.errors import (
    InvalidVintageYear,
    StockDerivedFromVintages,
    VintageNotApplicable,
    WineNotFound,
)
from cellarbook.schemas.wine import VintageEntry, WineCategory, WineCreate, WinePatch
from cellarbook.services.inventory import InventoryService
from cellarbook.storage.memory import MemoryWineStore


@pytest.fixture
def service() -> InventoryService:
    return InventoryService(MemoryWineStore(), max_stock_level=100)


def red(**fields) -> WineCreate:
    return WineCreate(name="Pinot Noir", category=WineCategory.RED, **fields)


class TestCreate:
    """Test adding wines."""

    @pytest.mark.asyncio
    async def test_total_from_vintages(self, service):
        """Test the stock level is derived from the vintages."""
        wine = await service.create(
            red(
                stock_level=99,
                vintage_stocks=[VintageEntry(vintage=2019, stock=2), VintageEntry(vintage=2020, stock=1)],
            )
        )
        assert wine.stock_level == 3

    @pytest.mark.asyncio
    async def test_configured_maximum(self, service):
        """Test direct stock levels clamp to the configured maximum."""
        wine = await service.create(
            WineCreate(name="Stout", category=WineCategory.BEER, stock_level=500)
        )
        assert wine.stock_level == 100


class TestUpdate:
    """Test presence-aware patches."""

    @pytest.mark.asyncio
    async def test_absent_fields_untouched(self, service):
        """Test fields missing from the patch keep their values."""
        wine = await service.create(red(producer="Domaine", rating=2))
        patch = WinePatch.model_validate({"notes": "Earthy"})
        updated = await service.update(wine.id, patch)
        assert updated.producer == "Domaine"
        assert updated.rating == 2
        assert updated.notes == "Earthy"

    @pytest.mark.asyncio
    async def test_patch_tracks_sent_fields(self):
        """Test an explicit null differs from an absent field."""
        patch = WinePatch.model_validate({"rating": None, "subType": "Dry"})
        assert patch.changes() == {"rating": None, "sub_type": "Dry"}

    @pytest.mark.asyncio
    async def test_category_change_to_applicable_keeps_direct_stock(self, service):
        """Test a Cider moved to White keeps its stock and has no vintages."""
        wine = await service.create(
            WineCreate(name="Sparkler", category=WineCategory.CIDER, stock_level=7)
        )
        updated = await service.update(wine.id, WinePatch(category=WineCategory.WHITE))
        assert updated.stock_level == 7
        assert updated.vintage_stocks == []

    @pytest.mark.asyncio
    async def test_missing_wine(self, service):
        """Test patching an unknown id raises WineNotFound."""
        with pytest.raises(WineNotFound):
            await service.update(3, WinePatch(rating=1))


class TestVintageOperations:
    """Test the vintage operations keep stock level and entries together."""

    @pytest.mark.asyncio
    async def test_every_mutation_keeps_total(self, service):
        """Test the stock level equals the vintage total after each step."""
        wine = await service.create(red())
        wine = await service.add_vintage(wine.id, 2015, 4)
        assert wine.stock_level == 4
        wine = await service.add_vintage(wine.id, 2017, 2)
        assert wine.stock_level == 6
        wine = await service.set_vintage_stock(wine.id, 2015, 1)
        assert wine.stock_level == 3
        wine = await service.remove_vintage(wine.id, 2017)
        assert wine.stock_level == 1
        assert wine.vintage_stocks == [VintageEntry(vintage=2015, stock=1)]

    @pytest.mark.asyncio
    async def test_invalid_year_writes_nothing(self, service):
        """Test a rejected year leaves the stored wine as it was."""
        wine = await service.create(red(vintage_stocks=[VintageEntry(vintage=2015, stock=1)]))
        with pytest.raises(InvalidVintageYear):
            await service.add_vintage(wine.id, 1776, 1)
        stored = await service.get(wine.id)
        assert stored.vintage_stocks == [VintageEntry(vintage=2015, stock=1)]

    @pytest.mark.asyncio
    async def test_not_applicable(self, service):
        """Test vintage operations on Fortified wines are refused."""
        wine = await service.create(WineCreate(name="Port", category=WineCategory.FORTIFIED))
        with pytest.raises(VintageNotApplicable):
            await service.add_vintage(wine.id, 2000)
        with pytest.raises(VintageNotApplicable):
            await service.remove_vintage(wine.id, 2000)

    @pytest.mark.asyncio
    async def test_list_vintages(self, service):
        """Test listing sorts without touching the stored order."""
        wine = await service.create(
            red(vintage_stocks=[VintageEntry(vintage=2020, stock=1), VintageEntry(vintage=2010, stock=1)])
        )
        listed = await service.list_vintages(wine.id, descending=False)
        assert [entry.vintage for entry in listed] == [2010, 2020]
        stored = await service.get(wine.id)
        assert [entry.vintage for entry in stored.vintage_stocks] == [2020, 2010]


class TestAdjustStock:
    """Test direct stock adjustments."""

    @pytest.mark.asyncio
    async def test_derived_stock_refused(self, service):
        """Test wines with vintages cannot be adjusted directly."""
        wine = await service.create(red(vintage_stocks=[VintageEntry(vintage=2015, stock=1)]))
        with pytest.raises(StockDerivedFromVintages):
            await service.adjust_stock(wine.id, "increment")

    @pytest.mark.asyncio
    async def test_set_clamped(self, service):
        """Test set is clamped to the configured maximum."""
        wine = await service.create(WineCreate(name="Mead", category=WineCategory.OTHER))
        updated = await service.adjust_stock(wine.id, "set", 250)
        assert updated.stock_level == 100

    @pytest.mark.asyncio
    async def test_delete_missing(self, service):
        """Test deleting an unknown id raises WineNotFound."""
        with pytest.raises(WineNotFound):
            await service.delete(1)
