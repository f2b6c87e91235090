import discord
from discord.ext import commands
import logging
import asyncio
from typing import Any, Dict, Optional, Set
import os

from .config_manager import ConfigManager
from .quiz_controller import DrillController
from .models import AnswerResult, GameSummary, SessionPhase
from .quiz_session import QuizSession
from .presentation import MASCOTS, render_equation, reveal_duration, reveal_frames

logger = logging.getLogger(__name__)

COLOR_ROUND = 0x3eb489
COLOR_GOOD = 0x00ff00
COLOR_BAD = 0xff5555
COLOR_INFO = 0x6699ff
COLOR_ERROR = 0xff0000

# Seconds before unpressed buttons stop listening
VIEW_TIMEOUT = 600


def build_round_embed(session_info: Dict[str, Any], equation: str) -> discord.Embed:
    """Embed showing the current question."""
    embed = discord.Embed(
        title=f"{MASCOTS}  Round {session_info['rounds_played']}/{session_info['target_rounds']}",
        description=f"## {equation}",
        color=COLOR_ROUND
    )
    embed.add_field(name="Score", value=str(session_info['score']), inline=True)
    embed.set_footer(text="Answer with /answer <number>")
    return embed


def build_feedback_embed(result: AnswerResult) -> discord.Embed:
    """Embed with the verdict for one answer."""
    if result.is_correct:
        embed = discord.Embed(
            title="Good",
            description=f"{result.left_factor} x {result.right_factor} = {result.expected}",
            color=COLOR_GOOD
        )
    else:
        embed = discord.Embed(
            title="Bad answer",
            description=f"The right answer is {result.expected}",
            color=COLOR_BAD
        )
    embed.set_footer(text=f"Score: {result.score}")
    return embed


def build_end_game_embed(summary: GameSummary) -> discord.Embed:
    """Embed shown once all rounds of a game were played."""
    embed = discord.Embed(
        title="End Game",
        description=f"Your final score is {summary.final_score}",
        color=COLOR_INFO
    )
    embed.add_field(
        name="Next",
        value="**Restart** resets the score, **Continue** keeps it for another game.",
        inline=False
    )
    return embed


class DrillView(discord.ui.View):
    """Buttons tied to one session and round of a channel's drill."""

    def __init__(self, bot: "DrillBot", channel_id: int, session: QuizSession, round_number: int):
        super().__init__(timeout=VIEW_TIMEOUT)
        self.bot = bot
        self.channel_id = channel_id
        self.session = session
        self.round_number = round_number

    def is_current(self, controller: DrillController) -> bool:
        """True while the channel still runs this session at this round."""
        return (controller.get_session(self.channel_id) is self.session
                and self.session.rounds_played == self.round_number)


class FeedbackView(DrillView):
    """OK button shown under each answer verdict."""

    @discord.ui.button(label="OK", style=discord.ButtonStyle.primary)
    async def ok(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self.bot.handle_ok(interaction, self)


class EndGameView(DrillView):
    """Restart / Continue choice shown at the end of a game."""

    @discord.ui.button(label="Restart", style=discord.ButtonStyle.danger)
    async def restart(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self.bot.handle_end_game_choice(interaction, "restart", self)

    @discord.ui.button(label="Continue", style=discord.ButtonStyle.success)
    async def continue_game(self, interaction: discord.Interaction, button: discord.ui.Button):
        await self.bot.handle_end_game_choice(interaction, "continue", self)


class DrillBot(commands.Bot):
    """Discord bot running multiplication drills"""

    def __init__(self, config=None):
        # Slash commands and buttons only need the guilds intent
        intents = discord.Intents.none()
        intents.guilds = True

        command_prefix = '!'
        if config and 'bot' in config:
            command_prefix = config['bot'].get('command_prefix', '!')

        super().__init__(
            command_prefix=command_prefix,
            intents=intents,
            help_command=None
        )

        self.app_config = config or {}

        self.config_manager: Optional[ConfigManager] = None
        self.drill_controller: Optional[DrillController] = None

        # Keep references so reveal tasks aren't garbage collected mid-run
        self._reveal_tasks: Set[asyncio.Task] = set()

    def init_components(self):
        """Create the managers and apply config.json settings."""
        self.config_manager = ConfigManager()
        if self.app_config:
            self.config_manager.apply_config(self.app_config)
        self.drill_controller = DrillController(self.config_manager)

    async def setup_hook(self):
        """Called when the bot is starting up"""
        try:
            logger.info("Setting up bot components...")
            self.init_components()
            await self.setup_commands()
            logger.info("Bot setup completed successfully")

        except Exception as e:
            logger.error(f"Error during bot setup: {e}")
            raise

    async def setup_commands(self):
        """Register all slash commands"""
        @self.tree.command(name="help", description="Display available commands and their descriptions")
        async def help_command(interaction: discord.Interaction):
            await self.handle_help(interaction)

        @self.tree.command(name="drill", description="Start a multiplication drill in this channel")
        async def drill_command(interaction: discord.Interaction):
            await self.handle_drill(interaction)

        @self.tree.command(name="answer", description="Answer the current question")
        async def answer_command(interaction: discord.Interaction, value: str):
            await self.handle_answer(interaction, value)

        @self.tree.command(name="rounds", description="Set the number of questions per game (5-20)")
        async def rounds_command(interaction: discord.Interaction, number: int):
            await self.handle_rounds(interaction, number)

        @self.tree.command(name="status", description="Show the current drill score and progress")
        async def status_command(interaction: discord.Interaction):
            await self.handle_status(interaction)

        @self.tree.command(name="stop", description="Stop the drill in this channel")
        async def stop_command(interaction: discord.Interaction):
            await self.handle_stop(interaction)

        logger.info("Slash commands registered successfully")

    async def on_ready(self):
        """Called when the bot has successfully connected to Discord"""
        logger.info(f"Bot is ready! Logged in as {self.user}")
        logger.info(f"Bot is in {len(self.guilds)} guilds")
        print(f"🤖 {self.user} is Ready and Online!")

        try:
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} slash commands")
            print(f"⚡ Synced {len(synced)} slash commands")
        except discord.HTTPException as e:
            logger.error(f"Failed to sync slash commands: {e}")
            print(f"❌ Failed to sync slash commands: {e}")

    async def on_error(self, event, *args, **kwargs):
        """Handle general bot errors"""
        logger.error(f"An error occurred in event {event}", exc_info=True)

    # Command handlers

    async def handle_help(self, interaction: discord.Interaction):
        """Handle /help command"""
        try:
            help_embed = discord.Embed(
                title=f"{MASCOTS}  Edutainment",
                description="Practice the multiplication table from 2 x 2 to 12 x 12",
                color=COLOR_ROUND
            )
            help_embed.add_field(
                name="🎮 Drill Commands",
                value=(
                    "`/drill` - Start a drill in this channel\n"
                    "`/answer <number>` - Answer the current question\n"
                    "`/status` - Show score and progress\n"
                    "`/stop` - Stop the drill"
                ),
                inline=False
            )
            help_embed.add_field(
                name="📋 Settings",
                value=(
                    f"`/rounds <number>` - Questions per game "
                    f"({ConfigManager.MIN_TARGET_ROUNDS}-{ConfigManager.MAX_TARGET_ROUNDS}), "
                    "applies from the next game"
                ),
                inline=False
            )
            help_embed.add_field(
                name="⚙️ Current Settings",
                value=f"```\n{self.config_manager.get_settings_summary()}\n```",
                inline=False
            )
            help_embed.set_footer(text="Use slash commands to interact with the bot")

            await interaction.response.send_message(embed=help_embed)

        except discord.HTTPException as e:
            logger.error(f"Error in help command: {e}")
            await self.send_error_response(interaction, "Failed to display help", "❌ Help Error")

    async def handle_drill(self, interaction: discord.Interaction):
        """Handle /drill command"""
        result = self.drill_controller.start_drill(interaction.channel_id)

        if not result['success']:
            await self.send_error_response(interaction, result['user_message'], "❌ Drill Start Failed")
            return

        await self.present_round(interaction, result['session_info'])

    async def handle_answer(self, interaction: discord.Interaction, value: str):
        """Handle /answer command"""
        channel_id = interaction.channel_id
        result = self.drill_controller.submit_answer(channel_id, value)

        if not result['success']:
            await self.send_error_response(interaction, result['user_message'], "❌ Answer Not Accepted")
            return

        try:
            await interaction.response.send_message(
                embed=build_feedback_embed(result['result']),
                view=FeedbackView(
                    self, channel_id,
                    self.drill_controller.get_session(channel_id),
                    result['session_info']['rounds_played']
                )
            )
        except discord.HTTPException as e:
            logger.error(f"Failed to send answer feedback in channel {channel_id}: {e}")
            await self.send_error_response(interaction, "Failed to show the answer result", "❌ Answer Error")

    async def handle_rounds(self, interaction: discord.Interaction, number: int):
        """Handle /rounds command"""
        result = self.drill_controller.set_target_rounds(interaction.channel_id, number)

        if not result['success']:
            await self.send_error_response(interaction, result['user_message'], "❌ Invalid Round Count")
            return

        try:
            embed = discord.Embed(
                title="✅ Round Count Updated",
                description=result['user_message'],
                color=COLOR_GOOD
            )
            await interaction.response.send_message(embed=embed)
        except discord.HTTPException as e:
            logger.error(f"Failed to confirm round count: {e}")

    async def handle_status(self, interaction: discord.Interaction):
        """Handle /status command"""
        try:
            channel_id = interaction.channel_id
            embed = discord.Embed(
                title="📊 Drill Status",
                description=self.drill_controller.get_session_status_summary(channel_id),
                color=COLOR_INFO
            )
            embed.add_field(
                name="⚙️ Settings",
                value=f"```\n{self.config_manager.get_settings_summary()}\n```",
                inline=False
            )
            await interaction.response.send_message(embed=embed)

        except discord.HTTPException as e:
            logger.error(f"Error in status command: {e}")
            await self.send_error_response(interaction, "Failed to get drill status", "❌ Status Error")

    async def handle_stop(self, interaction: discord.Interaction):
        """Handle /stop command"""
        result = self.drill_controller.stop_drill(interaction.channel_id)

        if not result['success']:
            await self.send_info_response(interaction, result['user_message'])
            return

        session_info = result['session_info']
        try:
            embed = discord.Embed(
                title="🛑 Drill Stopped",
                description=(
                    f"Final score: **{session_info['score']}** after "
                    f"{session_info['rounds_played']} round(s)"
                ),
                color=COLOR_INFO
            )
            embed.set_footer(text="Use /drill to start again.")
            await interaction.response.send_message(embed=embed)
        except discord.HTTPException as e:
            logger.error(f"Failed to confirm drill stop: {e}")

    # Button handlers

    async def handle_ok(self, interaction: discord.Interaction, view: DrillView):
        """Handle the OK button under an answer verdict"""
        channel_id = interaction.channel_id
        if not await self._check_view_current(interaction, view):
            return

        result = self.drill_controller.advance(channel_id)

        if not result['success']:
            await self.send_error_response(interaction, result['user_message'], "❌ Cannot Continue")
            return

        view.stop()
        await self._clear_buttons(interaction)

        if result['game_ended']:
            try:
                await interaction.response.send_message(
                    embed=build_end_game_embed(result['summary']),
                    view=EndGameView(
                        self, channel_id,
                        self.drill_controller.get_session(channel_id),
                        result['summary'].rounds_played
                    )
                )
            except discord.HTTPException as e:
                logger.error(f"Failed to send end game summary in channel {channel_id}: {e}")
            return

        await self.present_round(interaction, result['session_info'])

    async def handle_end_game_choice(self, interaction: discord.Interaction, choice: str, view: DrillView):
        """Handle the Restart / Continue buttons"""
        if not await self._check_view_current(interaction, view):
            return

        result = self.drill_controller.choose_end_game(interaction.channel_id, choice)

        if not result['success']:
            await self.send_error_response(interaction, result['user_message'], "❌ Cannot Start New Game")
            return

        view.stop()
        await self._clear_buttons(interaction)
        await self.present_round(interaction, result['session_info'])

    async def _check_view_current(self, interaction: discord.Interaction, view: DrillView) -> bool:
        """Reject presses on buttons left over from an earlier round or drill."""
        if view.is_current(self.drill_controller):
            return True

        logger.info(f"Ignoring stale button press in channel {interaction.channel_id} "
                    f"(round {view.round_number})")
        view.stop()
        await self._clear_buttons(interaction)
        await self.send_error_response(
            interaction, "These buttons belong to an earlier round.", "❌ Button Expired"
        )
        return False

    async def _clear_buttons(self, interaction: discord.Interaction):
        message = getattr(interaction, 'message', None)
        if message is None:
            return
        try:
            await message.edit(view=None)
        except discord.HTTPException as e:
            logger.warning(f"Could not remove buttons from message {message.id}: {e}")

    # Round presentation

    async def present_round(self, interaction: discord.Interaction, session_info: Dict[str, Any]):
        """Send the question for the current round, revealing it part by part when enabled."""
        left = session_info['left_factor']
        right = session_info['right_factor']
        animate = self.config_manager.get_reveal_animation()

        equation = render_equation(left, right, 0.0 if animate else reveal_duration())
        embed = build_round_embed(session_info, equation)

        try:
            await interaction.response.send_message(embed=embed)
        except discord.HTTPException as e:
            logger.error(f"Failed to present round in channel {interaction.channel_id}: {e}")
            return

        if not animate:
            return

        try:
            message = await interaction.original_response()
        except discord.HTTPException as e:
            logger.warning(f"Could not fetch round message for reveal: {e}")
            return

        task = asyncio.create_task(
            self._animate_reveal(message, interaction.channel_id, session_info)
        )
        self._reveal_tasks.add(task)
        task.add_done_callback(self._reveal_tasks.discard)

    async def _animate_reveal(self, message: discord.Message, channel_id: int, session_info: Dict[str, Any]):
        """Edit the round message through the reveal frames."""
        left = session_info['left_factor']
        right = session_info['right_factor']
        round_number = session_info['rounds_played']
        frames = reveal_frames(left, right)
        final_text = frames[-1][1]
        shown_text = frames[0][1]
        previous_at = 0.0

        try:
            for at, text in frames[1:]:
                await asyncio.sleep(at - previous_at)
                previous_at = at

                session = self.drill_controller.get_session(channel_id)
                if (session is None or session.phase != SessionPhase.ROUND_ACTIVE
                        or session.rounds_played != round_number):
                    break

                await message.edit(embed=build_round_embed(session_info, text))
                shown_text = text

            if shown_text != final_text:
                await message.edit(embed=build_round_embed(session_info, final_text))

        except discord.HTTPException as e:
            logger.warning(f"Reveal animation stopped for channel {channel_id}: {e}")

    # Responses

    async def send_error_response(self, interaction: discord.Interaction, message: str, title: str = "❌ Error"):
        """Send formatted error response to user"""
        try:
            embed = discord.Embed(
                title=title,
                description=message,
                color=COLOR_ERROR
            )
            embed.set_footer(text="If this error persists, try using /help for available commands")

            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException as e:
            logger.error(f"Failed to send error embed: {e}")
            try:
                simple_message = f"{title}: {message}"
                if interaction.response.is_done():
                    await interaction.followup.send(simple_message, ephemeral=True)
                else:
                    await interaction.response.send_message(simple_message, ephemeral=True)
            except discord.HTTPException:
                logger.error("Failed to send fallback error message")

    async def send_info_response(self, interaction: discord.Interaction, message: str, title: str = "ℹ️ Information"):
        """Send formatted info response to user"""
        try:
            embed = discord.Embed(
                title=title,
                description=message,
                color=COLOR_INFO
            )

            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException:
            logger.error("Failed to send info response to user")


async def run_bot(token=None, config=None):
    """Run the bot with proper error handling"""
    if not token:
        token = os.getenv('DISCORD_BOT_TOKEN')

    if not token:
        logger.error("No Discord bot token provided")
        return

    bot = DrillBot(config)

    try:
        logger.info("Starting Edutainment drill bot...")
        await bot.start(token)
    except discord.LoginFailure:
        logger.error("Invalid bot token provided")
    except discord.HTTPException as e:
        logger.error(f"HTTP error occurred: {e}")
    finally:
        if not bot.is_closed():
            await bot.close()
