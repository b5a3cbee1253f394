# provisioning_engine/domain/eggs/valheim.py
"""Valheim egg - dedicated server through SteamCMD."""

from provisioning_engine.domain.models import Egg, EggVariable


VALHEIM_EGG = Egg(
    name="Valheim",
    author="steam@example.com",
    description="Valheim dedicated server installed with SteamCMD",
    startup=(
        "./valheim_server.x86_64 -nographics -batchmode -name \"{{SERVER_NAME}}\" "
        "-port {{SERVER_PORT}} -world \"{{WORLD_NAME}}\" -password \"{{PASSWORD}}\" "
        "-public {{PUBLIC_SERVER}}"
    ),

    docker_images={
        "SteamCMD Debian": "ghcr.io/parkervcp/steamcmd:debian",
    },

    variables=[
        EggVariable(
            name="Server Name",
            env_variable="SERVER_NAME",
            default_value="My Valheim Server",
            rules="required|string|max:64",
            sort=1,
        ),
        EggVariable(
            name="World Name",
            env_variable="WORLD_NAME",
            default_value="Dedicated",
            rules="required|alpha_dash|max:32",
            sort=2,
        ),
        EggVariable(
            name="Password",
            env_variable="PASSWORD",
            description="Minimum five characters, must not contain the server name.",
            default_value=None,
            rules="required|string|min:5",
            sort=3,
        ),
        EggVariable(
            name="Public Server",
            env_variable="PUBLIC_SERVER",
            default_value="1",
            rules="required|boolean|in:0,1",
            sort=4,
        ),
        EggVariable(
            name="Steam App ID",
            env_variable="SRCDS_APPID",
            default_value="896660",
            rules="required|integer|in:896660",
            user_viewable=True,
            user_editable=False,
            sort=5,
        ),
    ],
)
