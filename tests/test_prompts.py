import unittest

from studio.prompts import (
    SCENE_CATEGORIES, all_scenes, build_ugc_prompt, find_category, is_known_scene
)


class TestUgcPrompt(unittest.TestCase):
    def test_scene_is_embedded_verbatim(self):
        prompt = build_ugc_prompt("Friends’ hangout spaces")
        self.assertIn('"Friends’ hangout spaces"', prompt)

    def test_prompt_requirements(self):
        prompt = build_ugc_prompt("Park or garden")
        self.assertIn("UGC", prompt)
        self.assertIn("Instagram", prompt)
        self.assertIn("interacting with the product", prompt)
        self.assertIn("soft, natural lighting", prompt)
        self.assertIn("shallow depth of field", prompt)
        self.assertIn("1:1 square image", prompt)


class TestSceneCatalog(unittest.TestCase):
    def test_catalog_shape(self):
        self.assertEqual(len(SCENE_CATEGORIES), 6)
        for category in SCENE_CATEGORIES:
            self.assertTrue({'id', 'label', 'icon', 'scenes'} <= set(category))
            self.assertTrue(category['scenes'])

    def test_scenes_are_unique(self):
        scenes = all_scenes()
        self.assertEqual(len(scenes), len(set(scenes)))

    def test_lookup(self):
        self.assertTrue(is_known_scene("Café / Coffee shop"))
        self.assertEqual(find_category("Café / Coffee shop")['id'], 'outdoor')
        self.assertEqual(find_category("LED-lit product table")['id'], 'product')

    def test_unknown_scenes(self):
        self.assertFalse(is_known_scene("Surface of the moon"))
        self.assertFalse(is_known_scene(""))
        self.assertFalse(is_known_scene(None))
        self.assertIsNone(find_category("Surface of the moon"))


if __name__ == "__main__":
    unittest.main()
