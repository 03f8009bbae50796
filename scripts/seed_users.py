"""Seed demo users and print a bearer token for each.

Usage: python -m scripts.seed_users [--count 20] [--out seeded_users.json]

The JSON file written to ``--out`` is the input of ``scripts.load_test``.
"""
import argparse
import asyncio
import json
import random
import sys
sys.path.insert(0, ".")

from sqlalchemy import select
from app.database import async_session_factory, engine
from app.models.user import ProfileVisibility, User
from app.security import create_access_token


FIRST_NAMES = {
    "male": ["Liam", "Noah", "Oliver", "Elijah", "James", "Lucas", "Mateo", "Ethan"],
    "female": ["Olivia", "Emma", "Amelia", "Sophia", "Mia", "Isla", "Ava", "Chloe"],
}
LAST_NAMES = ["Smith", "Jones", "Garcia", "Brown", "Taylor", "Martin", "Lee", "Walker"]
CITIES = [
    ("United Kingdom", "England", "London"),
    ("United Kingdom", "England", "Manchester"),
    ("United Kingdom", "Scotland", "Edinburgh"),
    ("Ireland", "Leinster", "Dublin"),
]
INTERESTS = ["hiking", "cooking", "travel", "music", "films", "running", "books", "art"]


def demo_user(index: int) -> dict:
    gender = "male" if index % 2 == 0 else "female"
    country, state, city = random.choice(CITIES)
    first = random.choice(FIRST_NAMES[gender])
    return {
        "email": f"demo{index}@desire.local",
        "username": f"demo{index}",
        "first_name": first,
        "last_name": random.choice(LAST_NAMES),
        "age": random.randint(21, 45),
        "gender": gender,
        "looking_for": random.choice(["male", "female", "both"]),
        "bio": f"Hi, I'm {first}.",
        "country": country,
        "state": state,
        "city": city,
        "interests": random.sample(INTERESTS, 3),
        "photos": [],
        "profile_visibility": random.choice(
            [ProfileVisibility.PUBLIC.value] * 3
            + [ProfileVisibility.MATCHES.value, ProfileVisibility.PRIVATE.value]
        ),
    }


async def seed(count: int) -> list[dict]:
    seeded = []
    async with async_session_factory() as session:
        for i in range(count):
            data = demo_user(i)
            existing = await session.execute(
                select(User).where(User.email == data["email"])
            )
            user = existing.scalar_one_or_none()
            if user is None:
                user = User(**data)
                session.add(user)
                await session.flush()
                print(f"  Seeded {user.username} ({user.gender}, looking for {user.looking_for})")
            else:
                print(f"  {user.username} already exists, skipping.")
            seeded.append({
                "id": str(user.id),
                "username": user.username,
                "token": create_access_token(user.id),
            })
        await session.commit()
    await engine.dispose()
    print(f"Done seeding {len(seeded)} users.")
    return seeded


def main():
    parser = argparse.ArgumentParser(description="Seed Desire demo users")
    parser.add_argument("--count", type=int, default=20, help="Number of users to seed")
    parser.add_argument("--out", type=str, default="seeded_users.json", help="Where to write ids and tokens")
    args = parser.parse_args()

    seeded = asyncio.run(seed(args.count))
    with open(args.out, "w") as f:
        json.dump(seeded, f, indent=2)
    for row in seeded:
        print(f"{row['username']}\t{row['id']}\tBearer {row['token']}")


if __name__ == "__main__":
    main()
