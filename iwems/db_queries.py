"""Parameterized SQL used by the core. Placeholders are bound by `iwems.helpers.bind_params`."""


# Roles

def get_user_role_query() -> str:
    """
    Returns a parameterized SQL query to fetch the single role assigned to a user.
    """
    return "SELECT role FROM user_roles WHERE user_id = :user_id LIMIT 1;"


def update_user_role_query() -> str:
    """
    Returns a parameterized SQL query for an explicit role switch.
    """
    return """
        UPDATE user_roles
        SET role = :role
        WHERE user_id = :user_id
        RETURNING user_id, role;
    """


def insert_user_role_query() -> str:
    """
    Returns a parameterized SQL query that records the role chosen at sign-up.
    """
    return """
        INSERT INTO user_roles (user_id, role)
        VALUES (:user_id, :role)
        RETURNING user_id, role;
    """


# Events

def get_events_for_owner_query() -> str:
    """
    Returns a parameterized SQL query to list a principal's events, soonest first.
    """
    return """
        SELECT *
        FROM events
        WHERE couple_id = :owner_id
        ORDER BY event_date ASC;
    """


def get_recent_events_query() -> str:
    return """
        SELECT id, couple_id, title, event_date, venue_location, budget, guest_count, status, created_at
        FROM events
        WHERE couple_id = :owner_id
        ORDER BY created_at DESC
        LIMIT :limit;
    """


def get_event_by_id_query() -> str:
    return "SELECT * FROM events WHERE id = :event_id LIMIT 1;"


def create_event_query() -> str:
    """
    Returns a parameterized SQL query to create an event owned by `owner_id`.
    """
    return """
        INSERT INTO events (couple_id, title, event_date, venue_location, budget, guest_count, status)
        VALUES (:owner_id, :title, :event_date, :venue_location, :budget, :guest_count, 'planning')
        RETURNING *;
    """


def update_event_fields_query(update_keys: list) -> str:
    """
    Returns a parameterized SQL query to update the editable fields of an event.
    The owner check is part of the WHERE clause. The caller must only pass
    known column names in `update_keys`.
    """
    set_clauses = ", ".join(f"{key} = :{key}" for key in update_keys)
    return f"""
        UPDATE events
        SET {set_clauses}
        WHERE id = :event_id AND couple_id = :owner_id
        RETURNING *;
    """


# Catalog

def get_approved_vendors_query() -> str:
    return """
        SELECT *
        FROM vendors
        WHERE approval_status = 'approved'
        ORDER BY rating DESC NULLS LAST;
    """


def get_approved_venues_query() -> str:
    return """
        SELECT *
        FROM venues
        WHERE approval_status = 'approved'
        ORDER BY rating DESC NULLS LAST;
    """


def get_vendor_by_id_query() -> str:
    return "SELECT * FROM vendors WHERE id = :vendor_id LIMIT 1;"


def get_venue_by_id_query() -> str:
    return "SELECT * FROM venues WHERE id = :venue_id LIMIT 1;"


# Vendor inquiries

def create_vendor_inquiry_query() -> str:
    """
    Returns a parameterized SQL query to create a vendor inquiry. The status is stamped by the lifecycle engine.
    """
    return """
        INSERT INTO vendor_inquiries (vendor_id, event_id, inquirer_id, message, status)
        VALUES (:vendor_id, :event_id, :inquirer_id, :message, :status)
        RETURNING *;
    """


def get_inquiries_for_inquirer_query() -> str:
    return """
        SELECT vi.*, v.business_name AS vendor_name
        FROM vendor_inquiries vi
        LEFT JOIN vendors v ON v.id = vi.vendor_id
        WHERE vi.inquirer_id = :inquirer_id
        ORDER BY vi.created_at DESC;
    """


def get_recent_inquiries_query() -> str:
    return """
        SELECT vi.*, v.business_name AS vendor_name
        FROM vendor_inquiries vi
        LEFT JOIN vendors v ON v.id = vi.vendor_id
        WHERE vi.inquirer_id = :inquirer_id
        ORDER BY vi.created_at DESC
        LIMIT :limit;
    """


def get_inquiries_for_vendor_query() -> str:
    return """
        SELECT vi.*, v.business_name AS vendor_name
        FROM vendor_inquiries vi
        LEFT JOIN vendors v ON v.id = vi.vendor_id
        WHERE vi.vendor_id = :vendor_id
        ORDER BY vi.created_at DESC;
    """


def get_inquiry_by_id_query() -> str:
    return "SELECT * FROM vendor_inquiries WHERE id = :inquiry_id LIMIT 1;"


def update_inquiry_status_query() -> str:
    """
    Returns a conditional status update. No row comes back when the inquiry is
    no longer in `expected_status`, which the caller reports as stale state.
    """
    return """
        UPDATE vendor_inquiries
        SET status = :status
        WHERE id = :inquiry_id AND status = :expected_status
        RETURNING *;
    """


# Booking requests

def create_booking_request_query() -> str:
    """
    Returns a parameterized SQL query to create a venue booking request. The status is stamped by the lifecycle engine.
    """
    return """
        INSERT INTO booking_requests (venue_id, event_id, requester_id, request_date, guest_count, message, status)
        VALUES (:venue_id, :event_id, :requester_id, :request_date, :guest_count, :message, :status)
        RETURNING *;
    """


def get_bookings_for_requester_query() -> str:
    return """
        SELECT br.*, vn.name AS venue_name
        FROM booking_requests br
        LEFT JOIN venues vn ON vn.id = br.venue_id
        WHERE br.requester_id = :requester_id
        ORDER BY br.created_at DESC;
    """


def get_recent_bookings_query() -> str:
    return """
        SELECT br.*, vn.name AS venue_name
        FROM booking_requests br
        LEFT JOIN venues vn ON vn.id = br.venue_id
        WHERE br.requester_id = :requester_id
        ORDER BY br.created_at DESC
        LIMIT :limit;
    """


def get_bookings_for_venue_query() -> str:
    return """
        SELECT br.*, vn.name AS venue_name
        FROM booking_requests br
        LEFT JOIN venues vn ON vn.id = br.venue_id
        WHERE br.venue_id = :venue_id
        ORDER BY br.created_at DESC;
    """


def get_booking_by_id_query() -> str:
    return "SELECT * FROM booking_requests WHERE id = :booking_id LIMIT 1;"


def update_booking_status_query() -> str:
    """
    Returns a conditional status update for a booking request, see `update_inquiry_status_query`.
    """
    return """
        UPDATE booking_requests
        SET status = :status
        WHERE id = :booking_id AND status = :expected_status
        RETURNING *;
    """


# Dashboard

def count_engagements_query() -> str:
    """
    Returns a single-row summary of a principal's inquiry and booking counts.
    """
    return """
        SELECT
            (SELECT COUNT(*) FROM vendor_inquiries WHERE inquirer_id = :principal_id) AS vendor_inquiries_count,
            (SELECT COUNT(*) FROM booking_requests WHERE requester_id = :principal_id) AS booking_requests_count;
    """
