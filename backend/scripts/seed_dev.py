#!/usr/bin/env python
"""Seed development database with required data.

Run against an empty development database:
    python scripts/seed_dev.py

Creates (if missing):
- borough enum type
- hub_projects, hub_sites, lnk_project_site tables
- A handful of sample projects
"""

import asyncio
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import text

from projecthub.core.database import async_session, engine

BOROUGHS = ["MANHATTAN", "BRONX", "BROOKLYN", "QUEENS", "STATEN ISLAND"]

SAMPLE_PROJECTS = [
    {
        "name": "Ladies' Mile Survey",
        "description": "Resurvey of commercial facades south of Madison Square",
        "address": "Broadway & W 20th St",
        "borough": "MANHATTAN",
        "latitude": 40.7397,
        "longitude": -73.9897,
    },
    {
        "name": "Grand Concourse Review",
        "description": "Art Deco apartment houses along the Concourse",
        "address": "Grand Concourse & E 167th St",
        "borough": "BRONX",
        "latitude": 40.8339,
        "longitude": -73.9180,
    },
    {
        "name": "Jackson Heights Inventory",
        "description": "Garden apartment complexes",
        "address": "37th Ave & 80th St",
        "borough": "QUEENS",
        "latitude": 40.7497,
        "longitude": -73.8866,
    },
]

DDL = [
    # No CREATE TYPE IF NOT EXISTS in PostgreSQL
    f"""
    DO $$ BEGIN
        CREATE TYPE borough AS ENUM ({", ".join(f"'{b}'" for b in BOROUGHS)});
    EXCEPTION WHEN duplicate_object THEN NULL;
    END $$
    """,
    """
    CREATE TABLE IF NOT EXISTS hub_projects (
        hub_project_id SERIAL PRIMARY KEY,
        hub_project_guid UUID NOT NULL DEFAULT gen_random_uuid(),
        name VARCHAR(255) NOT NULL,
        description TEXT,
        address TEXT,
        borough borough,
        latitude DOUBLE PRECISION,
        longitude DOUBLE PRECISION,
        created_at TIMESTAMP DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS hub_sites (
        hub_site_id SERIAL PRIMARY KEY,
        site_name VARCHAR(255) NOT NULL,
        site_address TEXT,
        latitude DOUBLE PRECISION,
        longitude DOUBLE PRECISION
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS lnk_project_site (
        hub_project_id INTEGER REFERENCES hub_projects(hub_project_id),
        hub_site_id INTEGER REFERENCES hub_sites(hub_site_id),
        linked_at TIMESTAMP DEFAULT NOW(),
        PRIMARY KEY (hub_project_id, hub_site_id)
    )
    """,
]


async def create_schema() -> None:
    async with engine.begin() as conn:
        for statement in DDL:
            await conn.execute(text(statement))
    print("Schema ready: borough, hub_projects, hub_sites, lnk_project_site")


async def seed_projects() -> int:
    """Insert sample projects that are not there yet (matched by name)."""
    created = 0
    async with async_session() as db:
        for project in SAMPLE_PROJECTS:
            existing = await db.execute(
                text("SELECT 1 FROM hub_projects WHERE name = :name"),
                {"name": project["name"]},
            )
            if existing.first():
                print(f"Project already exists: {project['name']}")
                continue
            await db.execute(
                text(
                    "INSERT INTO hub_projects "
                    "(name, description, address, borough, latitude, longitude) "
                    "VALUES (:name, :description, :address, "
                    "CAST(:borough AS borough), :latitude, :longitude)"
                ),
                project,
            )
            created += 1
            print(f"Created project: {project['name']}")
        await db.commit()
    return created


async def main() -> None:
    await create_schema()
    created = await seed_projects()
    print(f"Done: {created} project(s) created")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
