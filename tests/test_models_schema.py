from iwems.models import Base, main, render_schema_ddl


def test_all_tables_declared():
    assert set(Base.metadata.tables) == {
        "user_roles", "events", "vendors", "venues", "vendor_inquiries", "booking_requests",
    }


def test_ddl_orders_parents_before_children():
    ddl = render_schema_ddl()
    assert ddl.index("CREATE TABLE events") < ddl.index("CREATE TABLE vendor_inquiries")
    assert ddl.index("CREATE TABLE vendors") < ddl.index("CREATE TABLE vendor_inquiries")
    assert ddl.index("CREATE TABLE venues") < ddl.index("CREATE TABLE booking_requests")


def test_ddl_carries_status_and_count_checks():
    ddl = render_schema_ddl()
    assert "CONSTRAINT ck_booking_requests_status CHECK (status IN ('pending', 'approved', 'rejected', 'cancelled'))" in ddl
    assert "CONSTRAINT ck_vendor_inquiries_status CHECK (status IN ('pending', 'accepted', 'declined'))" in ddl
    assert "CONSTRAINT ck_booking_requests_guest_count CHECK (guest_count > 0)" in ddl
    assert "UNIQUE (user_id)" in ddl


def test_main_prints_schema(capsys):
    main()
    out = capsys.readouterr().out
    assert out.strip() == render_schema_ddl()
    assert "CREATE TABLE user_roles" in out
