"""Seed database with demo data."""
from decimal import Decimal
import uuid

from sqlalchemy.orm import Session

from fulfillment.database import Base, SessionLocal, engine
from fulfillment.models import (
    DesignJob, Manufacturer, Order, OrderLineItem, User, UserManufacturerAssociation,
)

ORG_ID = uuid.UUID('00000000-0000-0000-0000-000000000001')

DEMO_USERS = [
    {'id': uuid.UUID('00000000-0000-0000-0000-000000000101'), 'name': 'Admin', 'email': 'admin@example.com', 'role': 'admin'},
    {'id': uuid.UUID('00000000-0000-0000-0000-000000000102'), 'name': 'Sam Sales', 'email': 'sales@example.com', 'role': 'sales'},
    {'id': uuid.UUID('00000000-0000-0000-0000-000000000103'), 'name': 'Olive Ops', 'email': 'ops@example.com', 'role': 'ops'},
    {'id': uuid.UUID('00000000-0000-0000-0000-000000000104'), 'name': 'Dana Designer', 'email': 'design@example.com', 'role': 'designer'},
    {'id': uuid.UUID('00000000-0000-0000-0000-000000000105'), 'name': 'Max Maker', 'email': 'factory@example.com', 'role': 'manufacturer'},
    {'id': uuid.UUID('00000000-0000-0000-0000-000000000106'), 'name': 'Fay Finance', 'email': 'finance@example.com', 'role': 'finance'},
]

MANUFACTURER_ID = uuid.UUID('00000000-0000-0000-0000-000000000201')
ORDER_ID = uuid.UUID('00000000-0000-0000-0000-000000000301')
DESIGN_JOB_ID = uuid.UUID('00000000-0000-0000-0000-000000000401')


def seed(db: Session | None = None) -> None:
    """Seed database with demo data (one user per role, an order, a design job)."""
    owns_session = db is None
    if owns_session:
        Base.metadata.create_all(bind=engine)
        db = SessionLocal()

    try:
        users = {}
        for user_data in DEMO_USERS:
            user = User(org_id=ORG_ID, **user_data)
            db.add(user)
            users[user.role] = user
        db.flush()

        manufacturer = Manufacturer(id=MANUFACTURER_ID, name='Demo Apparel Works', lead_time_days=14)
        db.add(manufacturer)
        db.flush()
        db.add(UserManufacturerAssociation(user_id=users['manufacturer'].id, manufacturer_id=manufacturer.id))

        order = Order(
            id=ORDER_ID,
            org_id=ORG_ID,
            salesperson_id=users['sales'].id,
            order_code='ORD-0001',
            order_name='Team jerseys',
            status='approved',
        )
        db.add(order)
        db.flush()
        db.add(
            OrderLineItem(
                order_id=order.id,
                item_name='Home jersey',
                sizes={'s': 5, 'm': 10, 'l': 5},
                unit_price=Decimal('15.00'),
            )
        )

        db.add(
            DesignJob(
                id=DESIGN_JOB_ID,
                job_code='DJ-0001',
                order_id=order.id,
                salesperson_id=users['sales'].id,
                assigned_designer_id=users['designer'].id,
                status='assigned',
                brief='Home and away jersey artwork',
            )
        )

        db.commit()
        print("Database seeded successfully")
        print("\nDemo users:")
        for user_data in DEMO_USERS:
            print(f"  {user_data['email']} ({user_data['role']}) id={user_data['id']}")

    except Exception as e:
        db.rollback()
        print(f"Error seeding database: {e}")
        raise
    finally:
        if owns_session:
            db.close()


if __name__ == "__main__":
    seed()
