# provisioning_engine/domain/eggs/paper.py
"""Paper egg - high performance Minecraft Java server."""

from provisioning_engine.domain.models import Egg, EggVariable


PAPER_EGG = Egg(
    name="Paper",
    author="parker@example.com",
    description="High performance fork of the Spigot Minecraft server",
    startup="java -Xms128M -XX:MaxRAMPercentage=95.0 -jar {{SERVER_JARFILE}}",

    docker_images={
        "Java 21": "ghcr.io/parkervcp/yolks:java_21",
        "Java 17": "ghcr.io/parkervcp/yolks:java_17",
    },

    variables=[
        EggVariable(
            name="Minecraft Version",
            env_variable="MINECRAFT_VERSION",
            description="Version of Minecraft to download. Use 'latest' for the newest build.",
            default_value="latest",
            rules="nullable|string|max:20",
            sort=1,
        ),
        EggVariable(
            name="Server Jar File",
            env_variable="SERVER_JARFILE",
            description="Name of the server jarfile to run.",
            default_value="server.jar",
            rules="required|regex:/^([\\w\\d._-]+)(\\.jar)$/",
            sort=2,
        ),
        EggVariable(
            name="Build Number",
            env_variable="BUILD_NUMBER",
            description="Paper build to install. 'latest' installs the newest build.",
            default_value="latest",
            rules="required|string|max:20",
            user_editable=True,
            sort=3,
        ),
        EggVariable(
            name="Download Path",
            env_variable="DL_PATH",
            description="Direct download URL, overrides the version lookup.",
            default_value=None,
            rules="nullable|string",
            user_viewable=False,
            user_editable=False,
            sort=4,
        ),
    ],
)
