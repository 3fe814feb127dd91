from datetime import datetime, timedelta

from app.database import SessionLocal, engine, Base
from app.models import Activity

# Create tables
Base.metadata.create_all(bind=engine)

db = SessionLocal()

# Clear existing data
db.query(Activity).delete()

now = datetime.utcnow().replace(minute=0, second=0, microsecond=0)

activities = [
    Activity(
        title="Beach Cleanup",
        description="Collecting plastic and debris along the shoreline before the summer season.",
        date=now + timedelta(days=10),
        location="My Khe Beach, Da Nang",
        participants=60,
        status="upcoming",
        category="Môi trường",
    ),
    Activity(
        title="Weekend Reading Club",
        description="Volunteers read stories and help children with homework at the district library.",
        date=now + timedelta(days=3),
        location="District 3 Public Library",
        participants=15,
        status="upcoming",
        category="Giáo dục",
    ),
    Activity(
        title="Blood Donation Drive",
        description="Organising donors, registration desks and refreshments with the regional hospital.",
        date=now,
        location="Cho Ray Hospital",
        participants=120,
        status="ongoing",
        category="Y tế",
    ),
    Activity(
        title="Meals for the Elderly",
        description="Cooking and delivering warm meals to elderly residents living alone.",
        date=now - timedelta(days=14),
        location="Ward 7 Community Kitchen",
        participants=25,
        status="completed",
        category="Xã hội",
    ),
    Activity(
        title="Tree Planting Day",
        description="Planting native saplings on the riverbank to slow erosion.",
        date=now - timedelta(days=30),
        location="Saigon Riverside Park",
        participants=80,
        status="completed",
        category="Môi trường",
    ),
    Activity(
        title="Charity Book Fair",
        description="Sorting donated books and running stalls; proceeds go to rural school libraries.",
        date=now + timedelta(days=21),
        location="Nguyen Hue Walking Street",
        participants=40,
        status="upcoming",
        category="Khác",
    ),
]

db.add_all(activities)
db.commit()
db.close()

print(f"Seeded {len(activities)} activities")
