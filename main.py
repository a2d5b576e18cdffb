import sys
import logging
import pygame
import backend
import config
import frontend

log = logging.getLogger(__name__)


def start_game(cards, screen):
    session = backend.new_session(cards, deferred_reveal=True)
    if config.SHOW_TARGET:
        log.info("Target: %s (%s)", session.target, session.card.name)
    return frontend.Game(session, screen)


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cards = backend.get_cards()
        cols = backend.column_count(backend.pick_daily_card(cards).name_norm)
    except (FileNotFoundError, backend.CatalogError) as e:
        log.error("Cannot start Cardle: %s", e)
        return 1

    pygame.init()
    pygame.display.set_caption("Cardle")

    info = pygame.display.Info()
    screen_w, screen_h = info.current_w, info.current_h
    max_w = int(screen_w * config.WINDOW_FRACTION)
    max_h = int(screen_h * config.WINDOW_FRACTION)

    scale = frontend.compute_best_scale(max_w, max_h, cols)

    frontend.setup_fonts(scale)
    SCREEN = pygame.display.set_mode((frontend.WIDTH, frontend.HEIGHT))
    CLOCK = pygame.time.Clock()
    pygame.key.start_text_input()

    game = start_game(cards, SCREEN)

    running = True
    while running:
        dt = CLOCK.tick(config.FPS) / 1000.0
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if game.session.is_over and not game.session.revealing and not game.show_help:
                    if event.key == pygame.K_SPACE:
                        game = start_game(cards, SCREEN)
                    elif event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_F1:
                        game.toggle_help()
                    continue
                frontend.handle_key(game, event)
            elif event.type == pygame.TEXTINPUT:
                frontend.handle_text(game, event)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                action = frontend.handle_click(game, event.pos)
                if action == "restart":
                    game = start_game(cards, SCREEN)
                elif action == "quit":
                    running = False
                    break

        game.update(dt)
        game.draw(SCREEN)
        pygame.display.flip()

    pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
