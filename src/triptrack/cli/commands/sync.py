"""Room sync commands."""

from __future__ import annotations

import argparse

from triptrack import ConnectResult, SyncCoordinator, SyncError, TripWorkspace, generate_room_id
from triptrack.cli.common import confirm, open_workspace


def format_status(coordinator: SyncCoordinator) -> str:
    lines = [
        "",
        "triptrack - sync status",
        "",
        f"  Room:         {coordinator.room_id or '(none)'}",
        f"  Participant:  {coordinator.participant_id}",
        f"  Connection:   {coordinator.connection_state.value}",
        f"  Request:      {coordinator.request_state.value}",
    ]
    incoming = coordinator.incoming_request
    if incoming is not None:
        cities = len(incoming.proposed_snapshot.cities)
        lines.append(f"  Incoming:     from {incoming.from_participant} ({cities} cities)")
        lines.append("                run 'triptrack sync accept' or 'triptrack sync reject'")
    lines.append("")
    return "\n".join(lines)


async def _join(
    coordinator: SyncCoordinator, workspace: TripWorkspace, room_id: str, *, adopt: bool
) -> ConnectResult:
    result = await coordinator.connect(room_id)
    if result.created:
        print(f"Created room {room_id}; share this ID with the other device")
    else:
        print(f"Joined room {room_id}")
    if result.remote_differs and confirm(
        "The room already holds different data. Replace local data with it?", assume_yes=adopt
    ):
        await coordinator.adopt_room_snapshot()
        print(f"Adopted room data ({len(workspace.data.cities)} cities)")
    return result


async def run_sync(args: argparse.Namespace) -> int:
    import triptrack.cli as cli

    config = cli.load_config(args.config)
    workspace = open_workspace(config)

    async with cli.create_room_store(config) as store:
        coordinator = SyncCoordinator(store, workspace)
        try:
            command = args.sync_command
            if command == "disconnect":
                coordinator.disconnect()
                print("Disconnected; the room is no longer remembered on this device")
                return 0
            if command == "create":
                await _join(coordinator, workspace, generate_room_id(), adopt=False)
                return 0
            if command == "connect":
                await _join(coordinator, workspace, args.room, adopt=args.adopt)
                return 0

            if await coordinator.resume() is None:
                raise SyncError("no sync room on this device; run 'triptrack sync connect ROOM' first")

            if command == "push":
                await coordinator.direct_sync()
                print("Room snapshot replaced with local data")
            elif command == "request":
                await coordinator.request_sync()
                print("Sync request sent; waiting for the other participant to accept")
            elif command == "accept":
                accepted = await coordinator.accept_sync()
                print(f"Accepted sync request ({len(accepted.cities)} cities)")
            elif command == "reject":
                await coordinator.reject_sync()
                print("Sync request cleared")
            elif command == "status":
                print(cli._format_status(coordinator))
            return 0
        finally:
            coordinator.close()


__all__ = ["format_status", "run_sync"]
