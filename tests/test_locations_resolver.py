from src.liff_delivery.services.locations import AddressHierarchyResolver, LocationFilter

from .conftest import LOCATION_ROWS


def test_list_provinces_deduplicates_rows():
    resolver = AddressHierarchyResolver.from_rows(LOCATION_ROWS)

    provinces = resolver.list_provinces()

    assert [province.id for province in provinces] == [1, 50]
    assert provinces[0].display_name == "กรุงเทพมหานคร"


def test_list_provinces_search_matches_either_language():
    resolver = AddressHierarchyResolver.from_rows(LOCATION_ROWS)

    assert [p.id for p in resolver.list_provinces("chiang")] == [50]
    assert [p.id for p in resolver.list_provinces("กรุง")] == [1]
    assert resolver.list_provinces("nowhere") == []


def test_limit_applies_after_deduplication():
    resolver = AddressHierarchyResolver.from_rows(LOCATION_ROWS)

    districts = resolver.list_districts(1, limit=2)

    # Bang Rak appears on two rows but counts once toward the limit.
    assert [district.id for district in districts] == [101, 102]


def test_list_districts_scoped_to_province():
    resolver = AddressHierarchyResolver.from_rows(LOCATION_ROWS)

    assert [d.id for d in resolver.list_districts(50)] == [5001]
    assert resolver.list_districts(999) == []
    assert resolver.districts.fetch(LocationFilter()) == []


def test_list_subdistricts_requires_both_parents():
    resolver = AddressHierarchyResolver.from_rows(LOCATION_ROWS)

    subdistricts = resolver.list_subdistricts(1, 101)

    assert [s.id for s in subdistricts] == [10101, 10102]
    assert all(s.district_id == 101 and s.province_id == 1 for s in subdistricts)
    assert resolver.list_subdistricts(50, 101) == []
    assert resolver.subdistricts.fetch(LocationFilter(province_id=1)) == []


def test_postal_code_prefix_keeps_every_matching_row():
    resolver = AddressHierarchyResolver.from_rows(LOCATION_ROWS)

    matches = resolver.list_postal_codes_by_prefix("105")

    assert [m.postal_code for m in matches] == ["10500", "10500"]
    assert [m.subdistrict.id for m in matches] == [10101, 10102]
    assert resolver.list_postal_codes_by_prefix("") == []
    assert len(resolver.list_postal_codes_by_prefix("1", limit=1)) == 1


def test_resolve_postal_code():
    resolver = AddressHierarchyResolver.from_rows(LOCATION_ROWS)

    assert resolver.resolve_postal_code(1, 102, 10201) == "10330"
    assert resolver.resolve_postal_code(1, 2, 99) is None
    # Subdistrict exists but under a different district.
    assert resolver.resolve_postal_code(1, 102, 10101) is None


def test_find_tuple_matches_names_case_insensitively():
    resolver = AddressHierarchyResolver.from_rows(LOCATION_ROWS)

    row = resolver.find_tuple("bangkok", "BANG RAK", "si lom", "10500")
    assert row is not None
    assert row.subdistrict_id == 10101

    assert resolver.find_tuple("กรุงเทพมหานคร", "บางรัก", "สีลม", "10500") == row
    assert resolver.find_tuple("Bangkok", "Bang Rak", "Si Lom", "10330") is None
    assert resolver.find_tuple("Z", "Y", "X", "10110") is None


def test_rows_provider_is_read_lazily():
    calls = []

    def rows():
        calls.append(1)
        return LOCATION_ROWS

    resolver = AddressHierarchyResolver(rows)
    assert calls == []

    resolver.list_provinces()
    assert calls == [1]
