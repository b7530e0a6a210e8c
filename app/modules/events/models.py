# Supabase tables: events, groups, event_group_pairs, event_registrations
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

events:
- id: bigint (primary key)
- organizer: text (not null, defaults to the creating user)
- title: text (not null)
- description: text
- header_image: text (nullable) - storage key of the header image
- datetime: timestamptz (not null)
- location: text (not null)
- max_participants: integer (not null)
- event_group_pair: bigint (nullable, foreign key to event_group_pairs.id)
- is_ended: boolean (default: false)
- is_cancelled: boolean (default: false)

groups:
- id: bigint (primary key)
- title: text (not null)
- description: text

event_group_pairs:
- id: bigint (primary key)
- group_a: bigint (foreign key to groups.id, not null)
- group_b: bigint (foreign key to groups.id, not null)

event_registrations:
- id: bigint (primary key)
- user_id: uuid (foreign key to auth.users.id, not null) - stamped by the
  on_registration_insert_inject_user_id trigger when omitted
- event_id: bigint (foreign key to events.id, not null)
- group_id: bigint (nullable, foreign key to groups.id)
- present: boolean (default: false)

votes (legacy):
- user_id: uuid - stamped by the on_vote_insert_inject_user_id trigger

RPC create_event_with_groups(title, description, header_image, datetime,
location, max_participants, groupATitle, groupADescription, groupBTitle,
groupBDescription) creates both groups, their pair and the event in one
transaction.
"""
