#!/usr/bin/env python3
"""Emit deterministic Postgres DDL for the career page tables."""

from __future__ import annotations

import argparse


def _quote_sql(value: str) -> str:
    escaped = value.replace("'", "''")
    return f"'{escaped}'"


def _quote_ident(value: str) -> str:
    escaped = value.replace('"', '""')
    return f'"{escaped}"'


def render_sql(*, schema: str, default_primary_color: str, with_rls: bool) -> str:
    schema_name = _quote_ident(schema)
    default_theme = _quote_sql(f'{{"primaryColor": "{default_primary_color}"}}')

    statements = f"""-- Career page schema
-- Run this in the Supabase SQL editor (or equivalent privileged Postgres session).

create schema if not exists {schema_name};
set search_path to {schema_name}, public;

create table if not exists companies (
  id uuid primary key default gen_random_uuid(),
  name text not null,
  slug text not null unique,
  owner_id uuid not null,
  logo_url text,
  created_at timestamptz not null default now(),
  updated_at timestamptz not null default now()
);

create table if not exists career_pages (
  id uuid primary key default gen_random_uuid(),
  company_id uuid not null unique references companies (id) on delete cascade,
  theme jsonb not null default {default_theme}::jsonb,
  draft_puck_data jsonb,
  puck_data jsonb,
  published boolean not null default false,
  logo_url text,
  banner_url text,
  video_url text,
  created_at timestamptz not null default now(),
  updated_at timestamptz not null default now()
);

create table if not exists jobs (
  id uuid primary key default gen_random_uuid(),
  company_id uuid not null references companies (id) on delete cascade,
  title text not null,
  description text,
  location text,
  job_type text,
  published boolean not null default false,
  team text,
  work_policy text,
  employment_type text,
  experience_level text,
  salary_range text,
  job_slug text,
  currency text,
  expires_at timestamptz,
  created_at timestamptz not null default now(),
  updated_at timestamptz not null default now()
);

create index if not exists jobs_company_published_created_idx
  on jobs (company_id, published, created_at desc);
"""

    if with_rls:
        statements += """
alter table career_pages enable row level security;

drop policy if exists career_pages_owner_all on career_pages;
create policy career_pages_owner_all on career_pages
  for all
  using (exists (select 1 from companies c where c.id = company_id and c.owner_id = auth.uid()))
  with check (exists (select 1 from companies c where c.id = company_id and c.owner_id = auth.uid()));

drop policy if exists career_pages_public_read on career_pages;
create policy career_pages_public_read on career_pages
  for select
  using (published = true);
"""
    return statements


def main() -> None:
    parser = argparse.ArgumentParser(description="Emit Postgres DDL for career pages, companies and jobs.")
    parser.add_argument("--schema", default="public", help="Target Postgres schema")
    parser.add_argument(
        "--default-primary-color",
        default="#000000",
        help="primaryColor stored in the theme of newly created career pages",
    )
    parser.add_argument(
        "--with-rls",
        action="store_true",
        help="Also emit Supabase row level security policies for career_pages",
    )
    args = parser.parse_args()

    print(
        render_sql(
            schema=args.schema,
            default_primary_color=args.default_primary_color,
            with_rls=args.with_rls,
        )
    )


if __name__ == "__main__":
    main()
