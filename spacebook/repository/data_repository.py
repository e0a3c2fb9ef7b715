"""Repository layer responsible for all database access."""

from __future__ import annotations

import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from spacebook.domain.errors import (
    BookingConflictError,
    DuplicateEmailError,
    SpaceInUseError,
    StorageError,
)
from spacebook.domain.models import (
    Admin,
    BookedWindow,
    Company,
    CompanyReservation,
    Employee,
    PageResult,
    Reservation,
    Role,
    Space,
)
from spacebook.utils.config import Settings, get_settings
from spacebook.utils.logger import get_logger
from spacebook.utils.timeutils import from_epoch, to_epoch, utc_now


logger = get_logger(__name__)

_OVERLAP_ABORT_MESSAGE = "booking_overlap"

# Half-open overlap of booking `b` with [:window_start, :window_end).
_OVERLAP_CLAUSE = "b.start_time < :window_end AND :window_start < b.end_time"

_SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS admins (
        admin_id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        created_at INTEGER NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS companies (
        comp_id TEXT PRIMARY KEY,
        company_name TEXT NOT NULL,
        about TEXT,
        created_at INTEGER NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS employees (
        emp_id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        position TEXT NOT NULL,
        comp_id TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT,
        role TEXT NOT NULL CHECK (role IN ('EMP', 'MNG')),
        created_at INTEGER NOT NULL,
        FOREIGN KEY (comp_id) REFERENCES companies(comp_id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS spaces (
        space_id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        size INTEGER NOT NULL CHECK (size > 0),
        description TEXT,
        created_at INTEGER NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS bookings (
        booking_id TEXT PRIMARY KEY,
        space_id TEXT NOT NULL,
        booked_by TEXT NOT NULL,
        start_time INTEGER NOT NULL,
        end_time INTEGER NOT NULL,
        created_at INTEGER NOT NULL,
        CHECK (start_time < end_time),
        FOREIGN KEY (space_id) REFERENCES spaces(space_id),
        FOREIGN KEY (booked_by) REFERENCES employees(emp_id) ON DELETE CASCADE
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_bookings_space_window
    ON bookings(space_id, start_time, end_time);
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_bookings_holder
    ON bookings(booked_by);
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_employees_company
    ON employees(comp_id);
    """,
    # Exclusion constraint: no two bookings on one space may overlap.
    f"""
    CREATE TRIGGER IF NOT EXISTS bookings_no_overlap_insert
    BEFORE INSERT ON bookings
    WHEN EXISTS (
        SELECT 1 FROM bookings AS b
        WHERE b.space_id = NEW.space_id
          AND b.start_time < NEW.end_time
          AND NEW.start_time < b.end_time
    )
    BEGIN
        SELECT RAISE(ABORT, '{_OVERLAP_ABORT_MESSAGE}');
    END;
    """,
    f"""
    CREATE TRIGGER IF NOT EXISTS bookings_no_overlap_update
    BEFORE UPDATE OF start_time, end_time ON bookings
    WHEN EXISTS (
        SELECT 1 FROM bookings AS b
        WHERE b.space_id = NEW.space_id
          AND b.booking_id != NEW.booking_id
          AND b.start_time < NEW.end_time
          AND NEW.start_time < b.end_time
    )
    BEGIN
        SELECT RAISE(ABORT, '{_OVERLAP_ABORT_MESSAGE}');
    END;
    """,
    """
    CREATE TRIGGER IF NOT EXISTS bookings_owner_immutable
    BEFORE UPDATE OF space_id, booked_by ON bookings
    WHEN NEW.space_id != OLD.space_id OR NEW.booked_by != OLD.booked_by
    BEGIN
        SELECT RAISE(ABORT, 'booking_owner_immutable');
    END;
    """,
)


def _new_id() -> str:
    return str(uuid.uuid4())


def _rollback(connection: sqlite3.Connection) -> None:
    if not connection.in_transaction:
        return
    try:
        connection.rollback()
    except sqlite3.Error:
        logger.warning("Rollback failed; connection will be discarded", exc_info=True)


def _row_to_company(row: sqlite3.Row) -> Company:
    return Company(
        comp_id=str(row["comp_id"]),
        company_name=str(row["company_name"]),
        about=row["about"],
        created_at=from_epoch(row["created_at"]),
    )


def _row_to_employee(row: sqlite3.Row) -> Employee:
    return Employee(
        emp_id=str(row["emp_id"]),
        name=str(row["name"]),
        position=str(row["position"]),
        comp_id=str(row["comp_id"]),
        email=str(row["email"]),
        role=Role(row["role"]),
        created_at=from_epoch(row["created_at"]),
        password_hash=row["password_hash"],
    )


def _row_to_space(row: sqlite3.Row) -> Space:
    return Space(
        space_id=str(row["space_id"]),
        name=str(row["name"]),
        size=int(row["size"]),
        description=row["description"],
        created_at=from_epoch(row["created_at"]),
    )


def _row_to_reservation(row: sqlite3.Row) -> Reservation:
    return Reservation(
        booking_id=str(row["booking_id"]),
        space_id=str(row["space_id"]),
        holder_id=str(row["booked_by"]),
        start_time=from_epoch(row["start_time"]),
        end_time=from_epoch(row["end_time"]),
        created_at=from_epoch(row["created_at"]),
    )


def _offset(page: int, limit: int) -> int:
    return (page - 1) * limit


class DataRepository:
    """Encapsulates SQLite access so business logic stays storage-agnostic.

    Every call opens its own connection. Writes that must check before they
    write go through `transaction()`, which holds SQLite's reserved lock
    (`BEGIN IMMEDIATE`) until commit, so concurrent writers serialize.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    @contextmanager
    def _connect(self, operation: str, *, write: bool = False) -> Iterator[sqlite3.Connection]:
        try:
            connection = sqlite3.connect(
                self._db_path,
                timeout=self._settings.database_timeout_seconds,
                isolation_level=None,
            )
        except sqlite3.Error as exc:
            logger.exception("Could not open database for %s", operation)
            raise StorageError(f"{operation} failed: {exc}") from exc

        connection.row_factory = sqlite3.Row
        try:
            connection.execute("PRAGMA foreign_keys = ON;")
            if write:
                connection.execute("BEGIN IMMEDIATE;")
            yield connection
            if write:
                connection.execute("COMMIT;")
        except sqlite3.IntegrityError as exc:
            _rollback(connection)
            if _OVERLAP_ABORT_MESSAGE in str(exc):
                logger.info("Store rejected overlapping booking during %s", operation)
                raise BookingConflictError() from exc
            logger.exception("Integrity failure during %s", operation)
            raise StorageError(f"{operation} failed: {exc}") from exc
        except sqlite3.Error as exc:
            _rollback(connection)
            logger.exception("Database failure during %s", operation)
            raise StorageError(f"{operation} failed: {exc}") from exc
        except BaseException:
            _rollback(connection)
            raise
        finally:
            connection.close()

    def transaction(self, operation: str):
        """Open an all-or-nothing write unit; roll back on any error."""
        return self._connect(operation, write=True)

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        with self._connect("initialize database", write=True) as conn:
            for statement in _SCHEMA_STATEMENTS:
                conn.execute(statement)
        logger.info("Database initialized at %s", self._db_path)

    # --- Administrators ---

    def create_admin(self, email: str, password_hash: str) -> str:
        admin_id = _new_id()
        with self._connect("create admin", write=True) as conn:
            conn.execute(
                """
                INSERT INTO admins (admin_id, email, password_hash, created_at)
                VALUES (?, ?, ?, ?);
                """,
                (admin_id, email, password_hash, to_epoch(utc_now())),
            )
        return admin_id

    def get_admin_by_email(self, email: str) -> Optional[Admin]:
        with self._connect("get admin") as conn:
            row = conn.execute(
                "SELECT admin_id, email, password_hash, created_at FROM admins WHERE email = ?;",
                (email,),
            ).fetchone()
        if row is None:
            return None
        return Admin(
            admin_id=str(row["admin_id"]),
            email=str(row["email"]),
            password_hash=str(row["password_hash"]),
            created_at=from_epoch(row["created_at"]),
        )

    # --- Companies ---

    def create_company_with_manager(
        self,
        company_name: str,
        about: Optional[str],
        manager_name: str,
        manager_position: str,
        manager_email: str,
    ) -> tuple[str, str]:
        """Insert a company and its first manager in one transaction."""
        comp_id = _new_id()
        emp_id = _new_id()
        now = to_epoch(utc_now())
        with self._connect("create company", write=True) as conn:
            conn.execute(
                """
                INSERT INTO companies (comp_id, company_name, about, created_at)
                VALUES (?, ?, ?, ?);
                """,
                (comp_id, company_name, about, now),
            )
            self._insert_employee(
                conn,
                emp_id=emp_id,
                comp_id=comp_id,
                name=manager_name,
                position=manager_position,
                email=manager_email,
                role=Role.MANAGER,
                created_at=now,
            )
        return comp_id, emp_id

    def get_company(self, comp_id: str) -> Optional[Company]:
        with self._connect("get company") as conn:
            row = conn.execute(
                "SELECT comp_id, company_name, about, created_at FROM companies WHERE comp_id = ?;",
                (comp_id,),
            ).fetchone()
        return _row_to_company(row) if row is not None else None

    def list_companies(
        self,
        page: int,
        limit: int,
        company_name: Optional[str] = None,
    ) -> PageResult[Company]:
        filters = ["1 = 1"]
        params: dict[str, object] = {"limit": limit, "offset": _offset(page, limit)}
        if company_name:
            filters.append("company_name LIKE :company_name")
            params["company_name"] = f"%{company_name}%"
        where = " AND ".join(filters)
        with self._connect("list companies") as conn:
            rows = conn.execute(
                f"""
                SELECT comp_id, company_name, about, created_at
                FROM companies
                WHERE {where}
                ORDER BY created_at DESC, comp_id ASC
                LIMIT :limit OFFSET :offset;
                """,
                params,
            ).fetchall()
            total = conn.execute(
                f"SELECT COUNT(*) AS count FROM companies WHERE {where};",
                params,
            ).fetchone()["count"]
        return PageResult(
            items=[_row_to_company(row) for row in rows],
            page=page,
            limit=limit,
            total=int(total),
        )

    def update_company(
        self,
        comp_id: str,
        company_name: Optional[str] = None,
        about: Optional[str] = None,
    ) -> Optional[Company]:
        assignments: list[str] = []
        params: dict[str, object] = {"comp_id": comp_id}
        if company_name is not None:
            assignments.append("company_name = :company_name")
            params["company_name"] = company_name
        if about is not None:
            assignments.append("about = :about")
            params["about"] = about
        if not assignments:
            raise ValueError("update_company requires at least one field")
        with self._connect("update company", write=True) as conn:
            cursor = conn.execute(
                f"UPDATE companies SET {', '.join(assignments)} WHERE comp_id = :comp_id;",
                params,
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(
                "SELECT comp_id, company_name, about, created_at FROM companies WHERE comp_id = ?;",
                (comp_id,),
            ).fetchone()
        return _row_to_company(row)

    def delete_company(self, comp_id: str) -> bool:
        """Delete a company; employees and their bookings cascade."""
        with self._connect("delete company", write=True) as conn:
            cursor = conn.execute("DELETE FROM companies WHERE comp_id = ?;", (comp_id,))
            return cursor.rowcount > 0

    # --- Employees ---

    def _insert_employee(
        self,
        conn: sqlite3.Connection,
        *,
        emp_id: str,
        comp_id: str,
        name: str,
        position: str,
        email: str,
        role: Role,
        created_at: int,
    ) -> None:
        try:
            conn.execute(
                """
                INSERT INTO employees (emp_id, name, position, comp_id, email, role, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?);
                """,
                (emp_id, name, position, comp_id, email, role.value, created_at),
            )
        except sqlite3.IntegrityError as exc:
            if "employees.email" in str(exc):
                raise DuplicateEmailError() from exc
            raise

    def create_employee(
        self,
        comp_id: str,
        name: str,
        position: str,
        email: str,
        role: Role = Role.EMPLOYEE,
    ) -> str:
        emp_id = _new_id()
        with self._connect("create employee", write=True) as conn:
            self._insert_employee(
                conn,
                emp_id=emp_id,
                comp_id=comp_id,
                name=name,
                position=position,
                email=email,
                role=role,
                created_at=to_epoch(utc_now()),
            )
        return emp_id

    def get_employee(self, emp_id: str) -> Optional[Employee]:
        with self._connect("get employee") as conn:
            row = conn.execute("SELECT * FROM employees WHERE emp_id = ?;", (emp_id,)).fetchone()
        return _row_to_employee(row) if row is not None else None

    def get_employee_by_email(self, email: str) -> Optional[Employee]:
        with self._connect("get employee by email") as conn:
            row = conn.execute("SELECT * FROM employees WHERE email = ?;", (email,)).fetchone()
        return _row_to_employee(row) if row is not None else None

    def get_employee_company_id(self, emp_id: str) -> Optional[str]:
        with self._connect("resolve employee company") as conn:
            row = conn.execute(
                "SELECT comp_id FROM employees WHERE emp_id = ?;",
                (emp_id,),
            ).fetchone()
        return str(row["comp_id"]) if row is not None else None

    def get_company_employee(self, comp_id: str, emp_id: str) -> Optional[Employee]:
        with self._connect("get company employee") as conn:
            row = conn.execute(
                "SELECT * FROM employees WHERE emp_id = ? AND comp_id = ?;",
                (emp_id, comp_id),
            ).fetchone()
        return _row_to_employee(row) if row is not None else None

    def list_employees(
        self,
        comp_id: str,
        page: int,
        limit: int,
        name: Optional[str] = None,
        position: Optional[str] = None,
    ) -> PageResult[Employee]:
        filters = ["comp_id = :comp_id"]
        params: dict[str, object] = {
            "comp_id": comp_id,
            "limit": limit,
            "offset": _offset(page, limit),
        }
        if name:
            filters.append("name LIKE :name")
            params["name"] = f"%{name}%"
        if position:
            filters.append("position LIKE :position")
            params["position"] = f"%{position}%"
        where = " AND ".join(filters)
        with self._connect("list employees") as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM employees
                WHERE {where}
                ORDER BY name ASC, emp_id ASC
                LIMIT :limit OFFSET :offset;
                """,
                params,
            ).fetchall()
            total = conn.execute(
                f"SELECT COUNT(*) AS count FROM employees WHERE {where};",
                params,
            ).fetchone()["count"]
        return PageResult(
            items=[_row_to_employee(row) for row in rows],
            page=page,
            limit=limit,
            total=int(total),
        )

    def update_employee(
        self,
        comp_id: str,
        emp_id: str,
        name: Optional[str] = None,
        position: Optional[str] = None,
    ) -> Optional[Employee]:
        assignments: list[str] = []
        params: dict[str, object] = {"comp_id": comp_id, "emp_id": emp_id}
        if name is not None:
            assignments.append("name = :name")
            params["name"] = name
        if position is not None:
            assignments.append("position = :position")
            params["position"] = position
        if not assignments:
            raise ValueError("update_employee requires at least one field")
        with self._connect("update employee", write=True) as conn:
            cursor = conn.execute(
                f"""
                UPDATE employees SET {', '.join(assignments)}
                WHERE emp_id = :emp_id AND comp_id = :comp_id;
                """,
                params,
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM employees WHERE emp_id = ?;", (emp_id,)).fetchone()
        return _row_to_employee(row)

    def delete_employee(self, comp_id: str, emp_id: str) -> bool:
        with self._connect("delete employee", write=True) as conn:
            cursor = conn.execute(
                "DELETE FROM employees WHERE emp_id = ? AND comp_id = ?;",
                (emp_id, comp_id),
            )
            return cursor.rowcount > 0

    def activate_employee(self, emp_id: str, password_hash: str) -> bool:
        """Set the first password; no-op for accounts that are already active."""
        with self._connect("activate employee", write=True) as conn:
            cursor = conn.execute(
                """
                UPDATE employees
                SET password_hash = ?
                WHERE emp_id = ?
                  AND password_hash IS NULL;
                """,
                (password_hash, emp_id),
            )
            return cursor.rowcount > 0

    # --- Spaces ---

    def create_space(self, name: str, size: int, description: Optional[str]) -> str:
        space_id = _new_id()
        with self._connect("create space", write=True) as conn:
            conn.execute(
                """
                INSERT INTO spaces (space_id, name, size, description, created_at)
                VALUES (?, ?, ?, ?, ?);
                """,
                (space_id, name, size, description, to_epoch(utc_now())),
            )
        return space_id

    def get_space(self, space_id: str) -> Optional[Space]:
        with self._connect("get space") as conn:
            row = conn.execute("SELECT * FROM spaces WHERE space_id = ?;", (space_id,)).fetchone()
        return _row_to_space(row) if row is not None else None

    def list_spaces(
        self,
        page: int,
        limit: int,
        name: Optional[str] = None,
        size: Optional[int] = None,
    ) -> PageResult[Space]:
        filters = ["1 = 1"]
        params: dict[str, object] = {"limit": limit, "offset": _offset(page, limit)}
        if name:
            filters.append("name LIKE :name")
            params["name"] = f"%{name}%"
        if size is not None:
            filters.append("size = :size")
            params["size"] = size
        where = " AND ".join(filters)
        with self._connect("list spaces") as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM spaces
                WHERE {where}
                ORDER BY created_at DESC, space_id ASC
                LIMIT :limit OFFSET :offset;
                """,
                params,
            ).fetchall()
            total = conn.execute(
                f"SELECT COUNT(*) AS count FROM spaces WHERE {where};",
                params,
            ).fetchone()["count"]
        return PageResult(
            items=[_row_to_space(row) for row in rows],
            page=page,
            limit=limit,
            total=int(total),
        )

    def update_space(
        self,
        space_id: str,
        name: Optional[str] = None,
        size: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Optional[Space]:
        assignments: list[str] = []
        params: dict[str, object] = {"space_id": space_id}
        if name is not None:
            assignments.append("name = :name")
            params["name"] = name
        if size is not None:
            assignments.append("size = :size")
            params["size"] = size
        if description is not None:
            assignments.append("description = :description")
            params["description"] = description
        if not assignments:
            raise ValueError("update_space requires at least one field")
        with self._connect("update space", write=True) as conn:
            cursor = conn.execute(
                f"UPDATE spaces SET {', '.join(assignments)} WHERE space_id = :space_id;",
                params,
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM spaces WHERE space_id = ?;", (space_id,)).fetchone()
        return _row_to_space(row)

    def delete_space(self, space_id: str) -> bool:
        with self._connect("delete space", write=True) as conn:
            try:
                cursor = conn.execute("DELETE FROM spaces WHERE space_id = ?;", (space_id,))
            except sqlite3.IntegrityError as exc:
                raise SpaceInUseError() from exc
            return cursor.rowcount > 0

    def list_available_spaces(self, window_start: datetime, window_end: datetime) -> list[Space]:
        """Spaces with no booking overlapping the half-open window."""
        with self._connect("list available spaces") as conn:
            rows = conn.execute(
                f"""
                SELECT s.*
                FROM spaces AS s
                WHERE NOT EXISTS (
                    SELECT 1 FROM bookings AS b
                    WHERE b.space_id = s.space_id
                      AND {_OVERLAP_CLAUSE}
                )
                ORDER BY s.name ASC, s.space_id ASC;
                """,
                {"window_start": to_epoch(window_start), "window_end": to_epoch(window_end)},
            ).fetchall()
        return [_row_to_space(row) for row in rows]

    def list_space_windows(
        self,
        space_id: str,
        window_start: datetime,
        window_end: datetime,
    ) -> list[BookedWindow]:
        with self._connect("list space bookings") as conn:
            rows = conn.execute(
                f"""
                SELECT b.start_time, b.end_time
                FROM bookings AS b
                WHERE b.space_id = :space_id
                  AND {_OVERLAP_CLAUSE}
                ORDER BY b.start_time ASC;
                """,
                {
                    "space_id": space_id,
                    "window_start": to_epoch(window_start),
                    "window_end": to_epoch(window_end),
                },
            ).fetchall()
        return [
            BookedWindow(
                start_time=from_epoch(row["start_time"]),
                end_time=from_epoch(row["end_time"]),
            )
            for row in rows
        ]

    # --- Reservations (in-transaction helpers take the open connection) ---

    def space_exists(self, conn: sqlite3.Connection, space_id: str) -> bool:
        row = conn.execute("SELECT 1 FROM spaces WHERE space_id = ?;", (space_id,)).fetchone()
        return row is not None

    def employee_exists(self, conn: sqlite3.Connection, emp_id: str) -> bool:
        row = conn.execute("SELECT 1 FROM employees WHERE emp_id = ?;", (emp_id,)).fetchone()
        return row is not None

    def has_overlapping_reservation(
        self,
        conn: sqlite3.Connection,
        space_id: str,
        window_start: datetime,
        window_end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        row = conn.execute(
            f"""
            SELECT EXISTS(
                SELECT 1 FROM bookings AS b
                WHERE b.space_id = :space_id
                  AND (:exclude_id IS NULL OR b.booking_id != :exclude_id)
                  AND {_OVERLAP_CLAUSE}
            ) AS conflict;
            """,
            {
                "space_id": space_id,
                "exclude_id": exclude_booking_id,
                "window_start": to_epoch(window_start),
                "window_end": to_epoch(window_end),
            },
        ).fetchone()
        return bool(row["conflict"])

    def insert_reservation(
        self,
        conn: sqlite3.Connection,
        space_id: str,
        holder_id: str,
        start_time: datetime,
        end_time: datetime,
    ) -> str:
        booking_id = _new_id()
        conn.execute(
            """
            INSERT INTO bookings (booking_id, space_id, booked_by, start_time, end_time, created_at)
            VALUES (?, ?, ?, ?, ?, ?);
            """,
            (
                booking_id,
                space_id,
                holder_id,
                to_epoch(start_time),
                to_epoch(end_time),
                to_epoch(utc_now()),
            ),
        )
        return booking_id

    def fetch_holder_reservation(
        self,
        conn: sqlite3.Connection,
        booking_id: str,
        holder_id: str,
    ) -> Optional[Reservation]:
        row = conn.execute(
            "SELECT * FROM bookings WHERE booking_id = ? AND booked_by = ?;",
            (booking_id, holder_id),
        ).fetchone()
        return _row_to_reservation(row) if row is not None else None

    def update_reservation_end(
        self,
        conn: sqlite3.Connection,
        booking_id: str,
        end_time: datetime,
    ) -> None:
        conn.execute(
            "UPDATE bookings SET end_time = ? WHERE booking_id = ?;",
            (to_epoch(end_time), booking_id),
        )

    def delete_reservation(self, booking_id: str, holder_id: str) -> bool:
        with self._connect("cancel booking", write=True) as conn:
            cursor = conn.execute(
                "DELETE FROM bookings WHERE booking_id = ? AND booked_by = ?;",
                (booking_id, holder_id),
            )
            return cursor.rowcount > 0

    def get_holder_reservation(self, booking_id: str, holder_id: str) -> Optional[Reservation]:
        with self._connect("get booking") as conn:
            return self.fetch_holder_reservation(conn, booking_id, holder_id)

    def list_holder_reservations(self, holder_id: str) -> list[Reservation]:
        with self._connect("list own bookings") as conn:
            rows = conn.execute(
                """
                SELECT * FROM bookings
                WHERE booked_by = ?
                ORDER BY start_time ASC, booking_id ASC;
                """,
                (holder_id,),
            ).fetchall()
        return [_row_to_reservation(row) for row in rows]

    def list_company_reservations(self, comp_id: str) -> list[CompanyReservation]:
        with self._connect("list company bookings") as conn:
            rows = conn.execute(
                """
                SELECT
                    b.booking_id,
                    b.space_id,
                    b.booked_by,
                    b.start_time,
                    b.end_time,
                    e.name AS employee_name,
                    e.email
                FROM bookings AS b
                INNER JOIN employees AS e ON e.emp_id = b.booked_by
                WHERE e.comp_id = ?
                ORDER BY b.start_time ASC, b.booking_id ASC;
                """,
                (comp_id,),
            ).fetchall()
        return [
            CompanyReservation(
                booking_id=str(row["booking_id"]),
                space_id=str(row["space_id"]),
                holder_id=str(row["booked_by"]),
                employee_name=str(row["employee_name"]),
                email=str(row["email"]),
                start_time=from_epoch(row["start_time"]),
                end_time=from_epoch(row["end_time"]),
            )
            for row in rows
        ]

    def count_reservations(self) -> int:
        """Return persisted booking count for diagnostics and tests."""
        with self._connect("count bookings") as conn:
            return int(conn.execute("SELECT COUNT(*) AS count FROM bookings;").fetchone()["count"])
